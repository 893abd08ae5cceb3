import pytest

from kubehelper.types import (
    NODE_INFO_KEYS,
    Condition,
    Event,
    Node,
    ObjectMeta,
    Resource,
    Service,
    Workload,
    WorkloadStatus,
)

DEPLOYMENT = {
    "kind": "Deployment",
    "apiVersion": "apps/v1",
    "metadata": {"name": "web", "namespace": "prod", "uid": "ignored"},
    "spec": {"replicas": 3},
    "status": {
        "replicas": 3,
        "availableReplicas": 2,
        "conditions": [{"type": "Available", "status": "True", "reason": "x"}],
    },
}


def test_workload_drops_unknown_fields():
    w = Workload.from_object(DEPLOYMENT)
    assert w.to_dict() == {
        "kind": "Deployment",
        "apiVersion": "apps/v1",
        "metadata": {"name": "web", "namespace": "prod"},
        "status": {
            "replicas": 3,
            "availableReplicas": 2,
            "conditions": [{"type": "Available", "status": "True"}],
        },
    }
    assert str(w) == "web"


def test_workload_omits_empty_values():
    w = Workload.from_object({"metadata": {"name": "p"}, "status": {"replicas": 0}})
    assert w.to_dict() == {"metadata": {"name": "p"}, "status": {}}


def test_workload_round_trip():
    w = Workload.from_object(DEPLOYMENT)
    assert Workload.from_object(w.to_dict()) == w


def test_bad_type_raises():
    with pytest.raises(ValueError):
        Workload.from_object({"status": {"replicas": "three"}})


def test_not_a_mapping_raises():
    with pytest.raises(TypeError):
        Resource.from_object(42)


def test_resource_keeps_only_metadata():
    r = Resource.from_object({"metadata": {"name": "default"}, "status": {"phase": "Active"}})
    assert r.to_dict() == {"metadata": {"name": "default"}}
    assert str(r) == "default"


def test_condition_always_has_both_keys():
    assert Condition.from_dict({}).to_dict() == {"type": "", "status": ""}


def test_object_meta_round_trip():
    meta = ObjectMeta(name="a", namespace="b")
    assert ObjectMeta.from_dict(meta.to_dict()) == meta


def test_workload_status_round_trip():
    status = WorkloadStatus(replicas=1, available_replicas=1, conditions=[Condition("Ready", "True")])
    assert WorkloadStatus.from_dict(status.to_dict()) == status


def test_node_shape():
    node = Node.from_object(
        {
            "metadata": {"name": "n1"},
            "spec": {"podCIDRs": ["10.42.0.0/24"], "taints": []},
            "status": {
                "addresses": [{"type": "InternalIP", "address": "10.0.0.5"}],
                "nodeInfo": {"kubeletVersion": "v1.32.0"},
            },
        }
    )
    data = node.to_dict()
    assert data["spec"] == {"podCIDRs": ["10.42.0.0/24"]}
    assert data["status"]["addresses"] == [{"type": "InternalIP", "address": "10.0.0.5"}]
    assert set(data["status"]["nodeInfo"]) == set(NODE_INFO_KEYS)
    assert data["status"]["nodeInfo"]["kubeletVersion"] == "v1.32.0"
    assert Node.from_object(data) == node
    assert str(node) == "n1"


def test_service_shape():
    svc = Service.from_object({"metadata": {"name": "api"}, "spec": {"clusterIP": "x"}})
    assert svc.to_dict() == {"metadata": {"name": "api"}, "status": {}}


def test_event_shape():
    ev = Event.from_object(
        {
            "metadata": {"name": "e1", "namespace": "default"},
            "reason": "BackOff",
            "message": "restarting",
            "source": {"component": "kubelet"},
            "count": 4,
            "type": "Warning",
        }
    )
    data = ev.to_dict()
    assert data["source"] == {"component": "kubelet"}
    assert data["count"] == 4
    assert "kind" not in data
    assert Event.from_object(data) == ev
    assert str(ev) == "e1"