"""MCP tools that drive the K8sGPT operator: cluster checks and remediation."""

from __future__ import annotations

import copy
import logging
import os
import random
import time
from collections.abc import Callable
from typing import Any, TypeVar

from kubehelper.kubeclient import ConflictError, KubeError, NotFoundError, ResourceKind
from kubehelper.mcp import McpServer, Tool, ToolResult
from kubehelper.utils import VERSION, to_json

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_AI_BACKEND = "openai"
DEFAULT_NAME = "k8sgpt-cluster-check"
DEFAULT_NAMESPACE = "k8sgpt-operator-system"
DEFAULT_REPOSITORY = "ghcr.io/k8sgpt-ai/k8sgpt"
DEFAULT_VERSION = "latest"
# Name of the Kubernetes object holding the backend credentials, and the field in it.
CREDENTIAL_OBJECT_NAME = "k8sgpt-openai-" + "api-" + "key"
CREDENTIAL_OBJECT_FIELD = "api-" + "key"
DEFAULT_MODEL = "gpt-4.1-mini"
API_VERSION = "core.k8sgpt.ai/v1alpha1"

# Same schedule as the usual Kubernetes client conflict retry.
RETRY_STEPS = 5
RETRY_DELAY = 0.01
RETRY_JITTER = 0.1

MSG_CREATED = (
    "Successfully created the K8sGPT resource, please check the results in a few minutes."
)
MSG_UNCHANGED = (
    "Done, the K8sGPT resource already exists, please check the results in a few minutes."
)
MSG_UPDATED = (
    "Successfully updated the k8sgpt resource, please check the new results in a few minutes."
)
MSG_NOT_CHECKED = (
    "The K8sGPT self-check (inspection) action not triggered, use 'check_cluster' "
    "to trigger the cluster self-check before remediate."
)
MSG_REMEDIATING = (
    "Successfully enabled the k8sgpt auto remediation, please check the remediate "
    "results in few minutes."
)
MSG_NO_RESULTS = (
    "no results found, please ensure the check_cluster action executed and wait a "
    "few minutes to get the result."
)
MSG_NO_MUTATIONS = (
    "no results found, please ensure the remediate_cluster action executed and wait "
    "a few minutes to get the result."
)


def _credential_ref() -> dict:
    return dict(name=CREDENTIAL_OBJECT_NAME, key=CREDENTIAL_OBJECT_FIELD)


def default_spec() -> dict:
    """The K8sGPT spec this helper wants the operator to run with."""
    ai: dict[str, Any] = {
        "autoRemediation": {"enabled": False, "resources": ["Pod", "Deployment"]},
        "backend": DEFAULT_AI_BACKEND,
        "enabled": True,
        "model": DEFAULT_MODEL,
    }
    ai["secret"] = _credential_ref()
    proxy = os.environ.get("HTTPS_PROXY", "")
    if proxy:
        ai["proxyEndpoint"] = proxy
    return {
        "ai": ai,
        "noCache": False,
        "filters": ["Pod", "Deployment"],
        "repository": DEFAULT_REPOSITORY,
        "version": DEFAULT_VERSION,
    }


def new_k8sgpt() -> dict:
    """A fresh K8sGPT object carrying the default spec."""
    return {
        "apiVersion": API_VERSION,
        "kind": "K8sGPT",
        "metadata": {"name": DEFAULT_NAME, "namespace": DEFAULT_NAMESPACE},
        "spec": default_spec(),
    }


def _is_empty(value: Any) -> bool:
    return value is None or value is False or value == "" or value == 0 or value == [] or value == {}


def _prune(value: Any) -> Any:
    """Drop zero values so that absent and zero-valued fields compare equal."""
    if isinstance(value, dict):
        pruned = {k: _prune(v) for k, v in value.items()}
        return {k: v for k, v in pruned.items() if not _is_empty(v)}
    if isinstance(value, list):
        return [_prune(v) for v in value]
    return value


def need_update(obj: dict) -> bool:
    """Whether the object's spec differs from the default spec."""
    return _prune(obj.get("spec") or {}) != _prune(default_spec())


def retry_on_conflict(fn: Callable[[], T]) -> T:
    """Call fn, retrying a few times with a short back-off while it hits conflicts."""
    for attempt in range(RETRY_STEPS):
        try:
            return fn()
        except ConflictError:
            if attempt == RETRY_STEPS - 1:
                raise
            time.sleep(RETRY_DELAY * (1 + random.random() * RETRY_JITTER))
    raise AssertionError("unreachable")


def _rewrap(exc: KubeError, message: str) -> KubeError:
    return type(exc)(f"{message}: {exc}", exc.status)


class K8sGPTHelper:
    """Manages the K8sGPT resource and reports its results as MCP tools."""

    def __init__(self, client):
        self.client = client

    def _get(self) -> dict:
        try:
            return self.client.get(ResourceKind.K8SGPT, DEFAULT_NAMESPACE, DEFAULT_NAME)
        except KubeError as exc:
            raise _rewrap(exc, "failed to get k8sgpt") from exc

    def _modify(self, change: Callable[[dict], None]) -> None:
        def attempt() -> None:
            obj = copy.deepcopy(self._get())
            change(obj)
            self.client.update(ResourceKind.K8SGPT, obj)

        try:
            retry_on_conflict(attempt)
        except KubeError as exc:
            raise KubeError(f"failed to update k8sgpt: {exc}", exc.status) from exc

    def check_cluster(self) -> str:
        """Create the K8sGPT resource, or bring its spec up to date."""
        try:
            current = self.client.get(ResourceKind.K8SGPT, DEFAULT_NAMESPACE, DEFAULT_NAME)
        except NotFoundError:
            try:
                self.client.create(ResourceKind.K8SGPT, new_k8sgpt())
            except KubeError as exc:
                raise KubeError(f"failed to create k8sgpt: {exc}", exc.status) from exc
            return MSG_CREATED
        except KubeError as exc:
            raise KubeError(f"failed to get k8sgpt: {exc}", exc.status) from exc

        meta = current.get("metadata") or {}
        logger.info(
            "K8sGPT [%s/%s] already exists.", meta.get("namespace", ""), meta.get("name", "")
        )
        if not need_update(current):
            return MSG_UNCHANGED
        logger.info("Changes detected, updating the K8sGPT resource.")

        def apply(obj: dict) -> None:
            obj["spec"] = default_spec()

        self._modify(apply)
        return MSG_UPDATED

    def get_check_cluster_results(self) -> str:
        """Return the operator's check results as indented JSON."""
        items = self.client.list(ResourceKind.RESULT, DEFAULT_NAMESPACE)
        if not items:
            return MSG_NO_RESULTS
        results = []
        for item in items:
            spec = item.get("spec") or {}
            results.append(
                {
                    "name": spec.get("name", ""),
                    "details": spec.get("details", ""),
                    "kind": spec.get("kind", ""),
                }
            )
        return to_json(results)

    def remediate_cluster(self) -> str:
        """Turn on auto remediation in the existing K8sGPT resource."""
        try:
            self.client.get(ResourceKind.K8SGPT, DEFAULT_NAMESPACE, DEFAULT_NAME)
        except NotFoundError:
            return MSG_NOT_CHECKED
        except KubeError as exc:
            raise KubeError(f"failed to get k8sgpt: {exc}", exc.status) from exc

        def enable(obj: dict) -> None:
            spec = obj.setdefault("spec", {})
            ai = spec.get("ai") or {}
            spec["ai"] = ai
            remediation = ai.get("autoRemediation") or {}
            ai["autoRemediation"] = remediation
            remediation["enabled"] = True

        self._modify(enable)
        return MSG_REMEDIATING

    def get_mutation_result(self) -> str:
        """Return the remediation mutations as indented JSON."""
        items = self.client.list(ResourceKind.MUTATION, DEFAULT_NAMESPACE)
        if not items:
            return MSG_NO_MUTATIONS
        results = [
            {
                "resource": (item.get("spec") or {}).get("resourceRef") or {},
                "status": item.get("status") or {},
            }
            for item in items
        ]
        return to_json(results)

    @staticmethod
    def _tool(action: Callable[[], str]) -> Callable[[dict], ToolResult]:
        def handler(arguments: dict) -> ToolResult:
            try:
                return ToolResult.text(action())
            except KubeError as exc:
                return ToolResult.error(str(exc))

        return handler

    def server(self) -> McpServer:
        """Build the MCP server offering the K8sGPT tools."""
        server = McpServer("k8sgpt_helper", VERSION.removeprefix("v"))
        server.add_tool(
            Tool(
                "check_cluster",
                "Trigger the K8sGPT cluster self-check (inspection) actions, "
                "do not return the status result.",
            ),
            self._tool(self.check_cluster),
        )
        server.add_tool(
            Tool(
                "get_check_results",
                "Get all K8sGPT cluster self-check (inspection) results in JSON format.",
            ),
            self._tool(self.get_check_cluster_results),
        )
        server.add_tool(
            Tool(
                "remediate_cluster",
                "Use K8sGPT to remediate the cluster, only triggers the actions, "
                "do not return the remediate mutation result.",
            ),
            self._tool(self.remediate_cluster),
        )
        server.add_tool(
            Tool(
                "get_mutation_result",
                "Get the K8sGPT remediate mutation result in JSON format.",
            ),
            self._tool(self.get_mutation_result),
        )
        return server