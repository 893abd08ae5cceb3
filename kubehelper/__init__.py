"""MCP servers for Kubernetes resource queries and K8sGPT cluster checks."""

__version__ = "0.1.0"