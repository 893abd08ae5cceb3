"""Condensed views of Kubernetes objects used in list output."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

NODE_INFO_KEYS = (
    "machineID",
    "systemUUID",
    "bootID",
    "kernelVersion",
    "osImage",
    "containerRuntimeVersion",
    "kubeletVersion",
    "kubeProxyVersion",
    "operatingSystem",
    "architecture",
)


def _mapping(data: Any, what: str) -> Mapping:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{what}: expected an object, got {type(data).__name__}")
    return data


def _str(data: Mapping, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected a string, got {type(value).__name__}")
    return value


def _int(data: Mapping, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ValueError(f"{key}: expected an integer, got {value!r}")
    return int(value)


def _list(data: Mapping, key: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{key}: expected a list, got {type(value).__name__}")
    return value


def _source(obj: Any) -> Mapping:
    if isinstance(obj, Mapping):
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"cannot read a Kubernetes object from {type(obj).__name__}")


def _type_meta(obj: Any, data: Mapping) -> tuple[str, str]:
    return _str(data, "kind"), _str(data, "apiVersion")


def _put_type_meta(out: dict, kind: str, api_version: str) -> None:
    if kind:
        out["kind"] = kind
    if api_version:
        out["apiVersion"] = api_version


@dataclass
class ObjectMeta:
    name: str = ""
    namespace: str = ""

    @classmethod
    def from_dict(cls, data):
        data = _mapping(data, "metadata")
        return cls(name=_str(data, "name"), namespace=_str(data, "namespace"))

    def to_dict(self):
        out = {}
        if self.name:
            out["name"] = self.name
        if self.namespace:
            out["namespace"] = self.namespace
        return out


@dataclass
class Condition:
    type: str = ""
    status: str = ""

    @classmethod
    def from_dict(cls, data):
        data = _mapping(data, "condition")
        return cls(type=_str(data, "type"), status=_str(data, "status"))

    def to_dict(self):
        return {"type": self.type, "status": self.status}


def _conditions(data: Mapping) -> list[Condition]:
    return [Condition.from_dict(c) for c in _list(data, "conditions")]


@dataclass
class WorkloadStatus:
    replicas: int = 0
    available_replicas: int = 0
    conditions: list[Condition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        data = _mapping(data, "status")
        return cls(
            replicas=_int(data, "replicas"),
            available_replicas=_int(data, "availableReplicas"),
            conditions=_conditions(data),
        )

    def to_dict(self):
        out = {}
        if self.replicas:
            out["replicas"] = self.replicas
        if self.available_replicas:
            out["availableReplicas"] = self.available_replicas
        if self.conditions:
            out["conditions"] = [c.to_dict() for c in self.conditions]
        return out


@dataclass
class Resource:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)

    @classmethod
    def from_object(cls, obj):
        data = _source(obj)
        return cls(metadata=ObjectMeta.from_dict(data.get("metadata")))

    def to_dict(self):
        return {"metadata": self.metadata.to_dict()}

    def __str__(self):
        return self.metadata.name


@dataclass
class Workload:
    kind: str = ""
    api_version: str = ""
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    status: WorkloadStatus = field(default_factory=WorkloadStatus)

    @classmethod
    def from_object(cls, obj):
        data = _source(obj)
        kind, api_version = _type_meta(obj, data)
        return cls(
            kind=kind,
            api_version=api_version,
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            status=WorkloadStatus.from_dict(data.get("status")),
        )

    def to_dict(self):
        out: dict = {}
        _put_type_meta(out, self.kind, self.api_version)
        out["metadata"] = self.metadata.to_dict()
        out["status"] = self.status.to_dict()
        return out

    def __str__(self):
        return self.metadata.name


@dataclass
class NodeSpec:
    pod_cidrs: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        data = _mapping(data, "spec")
        cidrs = _list(data, "podCIDRs")
        if not all(isinstance(c, str) for c in cidrs):
            raise ValueError("podCIDRs: expected a list of strings")
        return cls(pod_cidrs=list(cidrs))

    def to_dict(self):
        return {"podCIDRs": list(self.pod_cidrs)} if self.pod_cidrs else {}


@dataclass
class NodeAddress:
    type: str = ""
    address: str = ""

    @classmethod
    def from_dict(cls, data):
        data = _mapping(data, "address")
        return cls(type=_str(data, "type"), address=_str(data, "address"))

    def to_dict(self):
        out = {}
        if self.type:
            out["type"] = self.type
        if self.address:
            out["address"] = self.address
        return out


@dataclass
class NodeStatus:
    phase: str = ""
    conditions: list[Condition] = field(default_factory=list)
    addresses: list[NodeAddress] = field(default_factory=list)
    node_info: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data):
        data = _mapping(data, "status")
        info = _mapping(data.get("nodeInfo"), "nodeInfo")
        return cls(
            phase=_str(data, "phase"),
            conditions=_conditions(data),
            addresses=[NodeAddress.from_dict(a) for a in _list(data, "addresses")],
            node_info={key: _str(info, key) for key in NODE_INFO_KEYS},
        )

    def to_dict(self):
        out: dict = {}
        if self.phase:
            out["phase"] = self.phase
        if self.conditions:
            out["conditions"] = [c.to_dict() for c in self.conditions]
        if self.addresses:
            out["addresses"] = [a.to_dict() for a in self.addresses]
        out["nodeInfo"] = {key: self.node_info.get(key, "") for key in NODE_INFO_KEYS}
        return out


@dataclass
class Node:
    kind: str = ""
    api_version: str = ""
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: NodeSpec = field(default_factory=NodeSpec)
    status: NodeStatus = field(default_factory=NodeStatus)

    @classmethod
    def from_object(cls, obj):
        data = _source(obj)
        kind, api_version = _type_meta(obj, data)
        return cls(
            kind=kind,
            api_version=api_version,
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            spec=NodeSpec.from_dict(data.get("spec")),
            status=NodeStatus.from_dict(data.get("status")),
        )

    def to_dict(self):
        out: dict = {}
        _put_type_meta(out, self.kind, self.api_version)
        out["metadata"] = self.metadata.to_dict()
        out["spec"] = self.spec.to_dict()
        out["status"] = self.status.to_dict()
        return out

    def __str__(self):
        return self.metadata.name


@dataclass
class ServiceStatus:
    conditions: list[Condition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        data = _mapping(data, "status")
        return cls(conditions=_conditions(data))

    def to_dict(self):
        return {"conditions": [c.to_dict() for c in self.conditions]} if self.conditions else {}


@dataclass
class Service:
    kind: str = ""
    api_version: str = ""
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    status: ServiceStatus = field(default_factory=ServiceStatus)

    @classmethod
    def from_object(cls, obj):
        data = _source(obj)
        kind, api_version = _type_meta(obj, data)
        return cls(
            kind=kind,
            api_version=api_version,
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            status=ServiceStatus.from_dict(data.get("status")),
        )

    def to_dict(self):
        out: dict = {}
        _put_type_meta(out, self.kind, self.api_version)
        out["metadata"] = self.metadata.to_dict()
        out["status"] = self.status.to_dict()
        return out

    def __str__(self):
        return self.metadata.name


@dataclass
class Event:
    kind: str = ""
    api_version: str = ""
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    reason: str = ""
    message: str = ""
    source: dict[str, str] = field(default_factory=dict)
    count: int = 0
    type: str = ""

    @classmethod
    def from_object(cls, obj):
        data = _source(obj)
        kind, api_version = _type_meta(obj, data)
        src = _mapping(data.get("source"), "source")
        source = {key: _str(src, key) for key in ("component", "host") if _str(src, key)}
        return cls(
            kind=kind,
            api_version=api_version,
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            reason=_str(data, "reason"),
            message=_str(data, "message"),
            source=source,
            count=_int(data, "count"),
            type=_str(data, "type"),
        )

    def to_dict(self):
        out: dict = {}
        if self.kind:
            out["kind"] = self.kind
        out["metadata"] = self.metadata.to_dict()
        if self.api_version:
            out["apiVersion"] = self.api_version
        if self.reason:
            out["reason"] = self.reason
        if self.message:
            out["message"] = self.message
        out["source"] = {k: v for k, v in self.source.items() if v}
        if self.count:
            out["count"] = self.count
        if self.type:
            out["type"] = self.type
        return out

    def __str__(self):
        return self.metadata.name