import json

from kubehelper.results import ListResult
from kubehelper.types import Resource, Workload


def test_empty_is_json_array():
    assert str(ListResult()) == "[]"


def test_items_rendered_compact_in_order():
    result = ListResult()
    result.add(Resource.from_object({"metadata": {"name": "a"}}))
    result.add(Resource.from_object({"metadata": {"name": "b"}}))
    text = str(result)
    assert text == '[{"metadata":{"name":"a"}},{"metadata":{"name":"b"}}]'


def test_round_trip_through_json():
    w = Workload.from_object({"metadata": {"name": "web"}, "status": {"replicas": 2}})
    result = ListResult()
    result.add(w)
    parsed = json.loads(str(result))
    assert [Workload.from_object(item) for item in parsed] == [w]