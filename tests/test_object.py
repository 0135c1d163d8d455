import json

import pytest
from pydantic import BaseModel, Field, ValidationError

from fastapi_jsh import ErrorList, ErrorObject, ResourceObject
from fastapi_jsh.schemas import Link


class User(BaseModel):
    name: str
    age: int = Field(ge=0)


def test_new_object_encodes_attributes():
    obj = ResourceObject.new("1", "user", {"name": "Ann", "age": 30})

    assert obj.id == "1"
    assert obj.type == "user"
    assert obj.attributes == b'{"name":"Ann","age":30}'


def test_new_object_accepts_models():
    obj = ResourceObject.new("1", "user", User(name="Ann", age=30))

    assert json.loads(obj.attributes) == {"name": "Ann", "age": 30}


def test_marshal_failure_is_internal_error():
    obj = ResourceObject(type="user", id="1")

    with pytest.raises(ErrorObject) as excinfo:
        obj.marshal({"when": object()})
    assert excinfo.value.status == 500
    assert "user" in excinfo.value.internal_message


def test_unmarshal_into_model():
    obj = ResourceObject.new("1", "user", {"name": "Ann", "age": 30})

    user = obj.unmarshal("user", User)

    assert user == User(name="Ann", age=30)


def test_unmarshal_type_mismatch_is_internal_error():
    obj = ResourceObject.new("1", "user", {"name": "Ann", "age": 30})

    with pytest.raises(ErrorObject) as excinfo:
        obj.unmarshal("post", User)
    assert excinfo.value.status == 500


def test_unmarshal_single_field_error_points_at_field():
    obj = ResourceObject.new("1", "user", {"name": "Ann", "age": -1})

    with pytest.raises(ErrorObject) as excinfo:
        obj.unmarshal("user", User)
    assert excinfo.value.status == 422
    assert excinfo.value.source_pointer == "/data/attributes/age"


def test_unmarshal_collects_every_field_error():
    obj = ResourceObject.new("1", "user", {"age": -1})

    with pytest.raises(ErrorList) as excinfo:
        obj.unmarshal("user", User)
    pointers = sorted(error.source_pointer for error in excinfo.value)
    assert pointers == ["/data/attributes/age", "/data/attributes/name"]
    assert excinfo.value.status == 422


def test_attributes_are_canonicalized():
    obj = ResourceObject.model_validate(
        {"type": "user", "id": "1", "attributes": {"name": "Zoë", "tags": [1, 2]}}
    )

    assert obj.attributes == '{"name":"Zoë","tags":[1,2]}'.encode("utf-8")


def test_invalid_attribute_bytes_are_rejected():
    with pytest.raises(ValidationError):
        ResourceObject(type="user", id="1", attributes=b"{not json")


def test_dump_omits_empty_members():
    assert ResourceObject(type="user").model_dump() == {"type": "user"}
    assert ResourceObject(type="user", id="1", attributes={}).model_dump() == {
        "type": "user",
        "id": "1",
        "attributes": {},
    }


def test_dump_keeps_links_and_relationships():
    obj = ResourceObject.model_validate(
        {
            "type": "post",
            "id": "3",
            "links": {"self": "/posts/3"},
            "relationships": {"author": {"data": {"type": "user", "id": "1"}}},
        }
    )

    assert obj.links == {"self": Link(href="/posts/3")}
    assert obj.model_dump() == {
        "type": "post",
        "id": "3",
        "links": {"self": "/posts/3"},
        "relationships": {"author": {"data": [{"type": "user", "id": "1"}]}},
    }


def test_status_is_never_serialized():
    obj = ResourceObject(type="user", id="1", status=202)

    assert "status" not in obj.model_dump()
    assert "status" not in json.loads(obj.model_dump_json())


def test_wire_round_trip():
    raw = {
        "type": "user",
        "id": "1",
        "attributes": {"name": "Ann", "nested": {"list": [1, 2.5, None, True]}},
        "links": {"self": {"href": "/users/1", "meta": {"v": 1}}},
    }

    obj = ResourceObject.model_validate_json(json.dumps(raw))

    assert json.loads(obj.model_dump_json()) == raw


def test_request_validation_allows_missing_id_on_create():
    ResourceObject(type="user").validate("POST")

    with pytest.raises(ErrorObject) as excinfo:
        ResourceObject(type="user").validate("PATCH")
    assert excinfo.value.status == 406


def test_validation_requires_type():
    with pytest.raises(ErrorObject) as excinfo:
        ResourceObject(id="1").validate("GET")
    assert excinfo.value.detail == "Type must be set for Object"


def test_response_validation_requires_id_for_every_verb():
    with pytest.raises(ErrorObject) as excinfo:
        ResourceObject(type="user").validate("POST", response=True)
    assert excinfo.value.detail == "ID must be set for Object"


@pytest.mark.parametrize(
    "method, expected",
    [("POST", 201), ("PATCH", 200), ("GET", 200)],
)
def test_response_validation_fills_default_status(method, expected):
    obj = ResourceObject(type="user", id="1")

    obj.validate(method, response=True)

    assert obj.status == expected


def test_read_response_always_uses_200():
    obj = ResourceObject(type="user", id="1", status=201)

    obj.validate("GET", response=True)

    assert obj.status == 200


@pytest.mark.parametrize("status", [202, 204])
def test_accepted_create_statuses(status):
    obj = ResourceObject(type="user", id="1", status=status)

    obj.validate("POST", response=True)

    assert obj.status == status


def test_rejected_create_status():
    obj = ResourceObject(type="user", id="1", status=200)

    with pytest.raises(ErrorObject) as excinfo:
        obj.validate("POST", response=True)
    assert excinfo.value.status == 406
    assert excinfo.value.detail == "POST Status must be one of 201, 202, 204, got 200."


def test_delete_object_response_is_rejected():
    with pytest.raises(ErrorObject) as excinfo:
        ResourceObject(type="user", id="1").validate("DELETE", response=True)
    assert excinfo.value.status == 406


def test_unknown_method_is_rejected():
    with pytest.raises(ErrorObject) as excinfo:
        ResourceObject(type="user", id="1").validate("PUT")
    assert excinfo.value.detail == "The JSON Specification does not accept 'PUT' requests."


@pytest.mark.parametrize("status", [200, 202, 204])
def test_accepted_update_statuses(status):
    obj = ResourceObject(type="user", id="1", status=status)

    obj.validate("PATCH", response=True)

    assert obj.status == status


def test_rejected_update_status():
    obj = ResourceObject(type="user", id="1", status=201)

    with pytest.raises(ErrorObject) as excinfo:
        obj.validate("PATCH", response=True)
    assert excinfo.value.status == 406
    assert excinfo.value.detail == "PATCH Status must be one of 200, 202, 204, got 201."
