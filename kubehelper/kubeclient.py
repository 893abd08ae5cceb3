"""Minimal Kubernetes REST client covering the resource kinds the helpers use."""

from __future__ import annotations

import base64
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import requests
import yaml

_SA_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")


class ResourceKind(Enum):
    NODE = ("", "v1", "nodes", False)
    POD = ("", "v1", "pods", True)
    SERVICE = ("", "v1", "services", True)
    NAMESPACE = ("", "v1", "namespaces", False)
    ENDPOINTS = ("", "v1", "endpoints", True)
    EVENT = ("", "v1", "events", True)
    DEPLOYMENT = ("apps", "v1", "deployments", True)
    DAEMONSET = ("apps", "v1", "daemonsets", True)
    STATEFULSET = ("apps", "v1", "statefulsets", True)
    REPLICASET = ("apps", "v1", "replicasets", True)
    CRONJOB = ("batch", "v1", "cronjobs", True)
    JOB = ("batch", "v1", "jobs", True)
    ENDPOINTSLICE = ("discovery.k8s.io", "v1", "endpointslices", True)
    INGRESS = ("networking.k8s.io", "v1", "ingresses", True)
    K8SGPT = ("core.k8sgpt.ai", "v1alpha1", "k8sgpts", True)
    RESULT = ("core.k8sgpt.ai", "v1alpha1", "results", True)
    MUTATION = ("core.k8sgpt.ai", "v1alpha1", "mutations", True)

    def __init__(self, group: str, version: str, plural: str, namespaced: bool):
        self.group = group
        self.version = version
        self.plural = plural
        self.namespaced = namespaced

    @property
    def api_prefix(self) -> str:
        if self.group:
            return f"/apis/{self.group}/{self.version}"
        return f"/api/{self.version}"


class KubeError(Exception):
    """An API request failed."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class NotFoundError(KubeError):
    """The requested object does not exist."""


class ConflictError(KubeError):
    """The object was modified concurrently."""


@dataclass
class KubeConfig:
    server: str
    token: str = ""
    ca_cert: str = ""
    client_cert: str = ""
    client_key: str = ""
    insecure: bool = False


def _data_file(encoded: str) -> str:
    with tempfile.NamedTemporaryFile(delete=False, suffix=".pem") as fh:
        fh.write(base64.b64decode(encoded))
        return fh.name


def _file_or_data(entry: dict, file_key: str, data_key: str, base: Path) -> str:
    if entry.get(data_key):
        return _data_file(entry[data_key])
    if entry.get(file_key):
        return str(base / entry[file_key])
    return ""


def _named(items: list, name: str, what: str) -> dict:
    for item in items or []:
        if item.get("name") == name:
            return item.get(what) or {}
    raise KubeError(f"{what} {name!r} not found in kubeconfig")


def _in_cluster() -> KubeConfig:
    host = os.environ["KUBERNETES_SERVICE_HOST"]
    port = os.environ.get("KUBERNETES_SERVICE_PORT", "443")
    if ":" in host:
        host = f"[{host}]"
    try:
        token = (_SA_DIR / "token").read_text().strip()
    except OSError as exc:
        raise KubeError(f"reading service account token: {exc}") from exc
    ca = _SA_DIR / "ca.crt"
    return KubeConfig(server=f"https://{host}:{port}", token=token, ca_cert=str(ca) if ca.exists() else "")


def load_kubeconfig(path: str | None = None) -> KubeConfig:
    """Load client settings from a kubeconfig file or the in-cluster environment."""
    if not path:
        path = os.environ.get("KUBECONFIG", "").split(os.pathsep)[0]
    if not path:
        if os.environ.get("KUBERNETES_SERVICE_HOST"):
            return _in_cluster()
        path = str(Path.home() / ".kube" / "config")

    file = Path(path).expanduser()
    try:
        doc = yaml.safe_load(file.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise KubeError(f"loading kubeconfig {str(file)!r}: {exc}") from exc

    context_name = doc.get("current-context")
    if not context_name:
        raise KubeError("kubeconfig has no current-context")
    context = _named(doc.get("contexts"), context_name, "context")
    cluster = _named(doc.get("clusters"), context.get("cluster", ""), "cluster")
    user = _named(doc.get("users"), context["user"], "user") if context.get("user") else {}

    server = cluster.get("server")
    if not server:
        raise KubeError("kubeconfig cluster has no server")
    base = file.parent
    token = user.get("token", "")
    if not token and user.get("tokenFile"):
        token = (base / user["tokenFile"]).read_text().strip()
    return KubeConfig(
        server=server.rstrip("/"),
        token=token,
        ca_cert=_file_or_data(cluster, "certificate-authority", "certificate-authority-data", base),
        client_cert=_file_or_data(user, "client-certificate", "client-certificate-data", base),
        client_key=_file_or_data(user, "client-key", "client-key-data", base),
        insecure=bool(cluster.get("insecure-skip-tls-verify", False)),
    )


class KubeClient:
    """Get, list, create and update objects through the Kubernetes API."""

    def __init__(self, config: KubeConfig):
        self.config = config
        self.session = requests.Session()
        self.session.headers["Accept"] = "application/json"
        if config.token:
            self.session.headers["Authorization"] = f"Bearer {config.token}"
        if config.insecure:
            self.session.verify = False
        elif config.ca_cert:
            self.session.verify = config.ca_cert
        if config.client_cert and config.client_key:
            self.session.cert = (config.client_cert, config.client_key)

    def _url(self, kind: ResourceKind, namespace: str = "", name: str = "") -> str:
        url = self.config.server.rstrip("/") + kind.api_prefix
        if kind.namespaced and namespace:
            url += f"/namespaces/{namespace}"
        url += f"/{kind.plural}"
        if name:
            url += f"/{name}"
        return url

    def _request(self, method: str, url: str, **kwargs: Any) -> dict:
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            raise KubeError(str(exc)) from exc
        if resp.ok:
            return resp.json()
        try:
            message = resp.json().get("message") or resp.text
        except ValueError:
            message = resp.text
        error = {404: NotFoundError, 409: ConflictError}.get(resp.status_code, KubeError)
        raise error(message or f"HTTP {resp.status_code}", resp.status_code)

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict:
        return self._request("GET", self._url(kind, namespace, name))

    def list(self, kind: ResourceKind, namespace: str = "", label_selector: str = "", limit: int = 0) -> list:
        params: dict[str, Any] = {}
        if limit > 0:
            params["limit"] = limit
        if label_selector:
            params["labelSelector"] = label_selector
        body = self._request("GET", self._url(kind, namespace), params=params)
        return body.get("items") or []

    def create(self, kind: ResourceKind, obj: dict) -> dict:
        namespace = (obj.get("metadata") or {}).get("namespace", "")
        return self._request("POST", self._url(kind, namespace), json=obj)

    def update(self, kind: ResourceKind, obj: dict) -> dict:
        meta = obj.get("metadata") or {}
        if not meta.get("name"):
            raise KubeError("object has no name")
        return self._request("PUT", self._url(kind, meta.get("namespace", ""), meta["name"]), json=obj)