[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubehelper"
version = "0.1.0"
description = "MCP servers for querying Kubernetes resources and driving K8sGPT cluster checks"
requires-python = ">=3.10"
keywords = ["kubernetes", "mcp", "k8sgpt", "model-context-protocol", "cluster"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "requests",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
kubehelper = "kubehelper.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kubehelper"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
