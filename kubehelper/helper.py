"""MCP tools that get and list Kubernetes resources."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from kubehelper.kubeclient import KubeError, ResourceKind
from kubehelper.mcp import McpServer, Tool, ToolParameter, ToolResult
from kubehelper.results import ListResult
from kubehelper.types import Event, Node, Resource, Service, Workload
from kubehelper.utils import VERSION, to_json

logger = logging.getLogger(__name__)

RESOURCE_CHOICES = (
    "pod",
    "deployment",
    "statefulset",
    "daemonset",
    "job",
    "cronjob",
    "service",
    "namespace",
    "node",
    "event",
)

_GET_KINDS: dict[str, ResourceKind] = {
    "deployment": ResourceKind.DEPLOYMENT,
    "daemonset": ResourceKind.DAEMONSET,
    "statefulset": ResourceKind.STATEFULSET,
    "job": ResourceKind.JOB,
    "cronjob": ResourceKind.CRONJOB,
    "pod": ResourceKind.POD,
    "": ResourceKind.POD,
    "namespace": ResourceKind.NAMESPACE,
    "node": ResourceKind.NODE,
    "service": ResourceKind.SERVICE,
}

_LIST_KINDS: dict[str, tuple[ResourceKind, Callable[[Any], Any]]] = {
    "deployment": (ResourceKind.DEPLOYMENT, Workload.from_object),
    "daemonset": (ResourceKind.DAEMONSET, Workload.from_object),
    "statefulset": (ResourceKind.STATEFULSET, Workload.from_object),
    "job": (ResourceKind.JOB, Workload.from_object),
    "cronjob": (ResourceKind.CRONJOB, Workload.from_object),
    "pod": (ResourceKind.POD, Workload.from_object),
    "": (ResourceKind.POD, Workload.from_object),
    "node": (ResourceKind.NODE, Node.from_object),
    "namespace": (ResourceKind.NAMESPACE, Resource.from_object),
    "service": (ResourceKind.SERVICE, Service.from_object),
    "event": (ResourceKind.EVENT, Event.from_object),
}


def _normalize(resource: str) -> str:
    lowered = resource.lower()
    return lowered[:-1] if lowered.endswith("s") else lowered


def _namespace(namespace: str) -> str:
    namespace = namespace.lower()
    return "" if namespace == "*" else namespace


def _wrap(exc: KubeError, resource: str) -> KubeError:
    return type(exc)(f"failed to list {resource}: {exc}", exc.status)


class KubeHelper:
    """Gets and lists Kubernetes resources and exposes them as MCP tools."""

    def __init__(self, client):
        self.client = client

    def get_resource(self, resource: str, name: str, namespace: str = "") -> str:
        """Return one object as indented JSON, without its managed fields."""
        kind = _GET_KINDS.get(_normalize(resource))
        if kind is None:
            raise ValueError(f"unsupported workload type: {resource}")
        ns = _namespace(namespace)
        if kind is ResourceKind.NAMESPACE:
            ns, name = "", ns
        elif kind is ResourceKind.NODE:
            ns = ""
        try:
            obj = self.client.get(kind, ns, name)
        except KubeError as exc:
            raise _wrap(exc, resource) from exc
        metadata = obj.get("metadata")
        if isinstance(metadata, dict):
            metadata.pop("managedFields", None)
        return to_json(obj)

    def list_resource(
        self,
        resource: str,
        namespace: str = "",
        labels: Iterable[str] = (),
        limit: int = 0,
    ) -> str:
        """Return a compact JSON array summarising the matching objects."""
        entry = _LIST_KINDS.get(_normalize(resource))
        if entry is None:
            raise ValueError(f"unsupported workload type: {resource}")
        kind, condense = entry
        selector = ",".join(labels)
        try:
            items = self.client.list(
                kind, _namespace(namespace), label_selector=selector, limit=limit
            )
        except KubeError as exc:
            raise _wrap(exc, resource) from exc
        result = ListResult()
        for item in items:
            result.add(condense(item))
        return str(result)

    def _list_handler(self, arguments: dict) -> ToolResult:
        resource = arguments.get("resource")
        if not isinstance(resource, str):
            raise ValueError("resource not provided")
        namespace = arguments.get("namespace")
        namespace = namespace if isinstance(namespace, str) else ""
        labels = arguments.get("labels")
        labels = [s for s in labels if isinstance(s, str)] if isinstance(labels, list) else []
        limit = arguments.get("limit")
        limit = int(limit) if isinstance(limit, (int, float)) and not isinstance(limit, bool) else 0
        try:
            result = self.list_resource(resource, namespace, labels, limit)
        except (ValueError, KubeError) as exc:
            return ToolResult.error(str(exc))
        logger.debug("handle the ListResource Handler")
        return ToolResult.text(result)

    def _get_handler(self, arguments: dict) -> ToolResult:
        resource = arguments.get("resource")
        if not isinstance(resource, str):
            raise ValueError("resource not provided")
        name = arguments.get("name")
        if not isinstance(name, str):
            raise ValueError("resource name not provided, use list_resources to list resources")
        namespace = arguments.get("namespace")
        namespace = namespace if isinstance(namespace, str) else ""
        try:
            result = self.get_resource(resource, name, namespace)
        except (ValueError, KubeError) as exc:
            return ToolResult.error(str(exc))
        logger.debug("handle the getResource Handler")
        return ToolResult.text(result)

    def server(self) -> McpServer:
        """Build the MCP server offering the list and get tools."""
        server = McpServer("kubernetes_helper", VERSION.removeprefix("v"))
        server.add_tool(
            Tool(
                "list_resources",
                "List the kubernetes  with status information in JSON format",
                [
                    ToolParameter(
                        "resource",
                        description="The kubernetes workload kind to query "
                        "(pod, deployment, statefulset, daemonset, job, cronjob, service, namespace, node)",
                        required=True,
                        enum=RESOURCE_CHOICES,
                        default="pod",
                    ),
                    ToolParameter(
                        "namespace",
                        description="The kubernetes namespace to query",
                        default="",
                    ),
                    ToolParameter(
                        "limit",
                        type="number",
                        description="The limit of the workload to query",
                        default=50,
                    ),
                ],
            ),
            self._list_handler,
        )
        server.add_tool(
            Tool(
                "get_single_resource",
                "Get one kubernetes resource detailed information in JSON format",
                [
                    ToolParameter(
                        "resource",
                        description="The kubernetes resource kind to query "
                        "(pod, deployment, statefulset, daemonset, job, cronjob, service, namespace, node, event)",
                        required=True,
                        enum=RESOURCE_CHOICES,
                        default="pod",
                    ),
                    ToolParameter(
                        "namespace",
                        description="The kubernetes namespace of the resource to query",
                        default="",
                    ),
                    ToolParameter(
                        "name",
                        description="The kubernetes resource name to get, must be provided",
                        required=True,
                    ),
                ],
            ),
            self._get_handler,
        )
        return server