"""Pydantic schema for JSON:API resource objects."""

from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import (
    BaseModel,
    Field,
    SerializerFunctionWrapHandler,
    ValidationError,
    field_serializer,
    field_validator,
    model_serializer,
)

from fastapi_jsh.core.constants import Verb
from fastapi_jsh.core.errors import (
    ErrorList,
    input_error,
    internal_error,
    resolve_verb,
    specification_error,
)

from .link import Link
from .relationship import Relationship

ModelT = TypeVar("ModelT", bound=BaseModel)

ACCEPTED_STATUSES: dict[Verb, frozenset[int]] = {
    Verb.CREATE: frozenset({201, 202, 204}),
    Verb.UPDATE: frozenset({200, 202, 204}),
    Verb.READ: frozenset({200}),
}
DEFAULT_STATUSES: dict[Verb, int] = {Verb.CREATE: 201, Verb.UPDATE: 200, Verb.READ: 200}


def encode_attributes(value: Any) -> bytes | None:
    """Encode attributes into canonical compact JSON bytes."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = json.loads(value)
    elif isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class ResourceObject(BaseModel):
    """Resource object with raw attributes, links and relationships.

    ``attributes`` stays an opaque JSON blob until ``unmarshal`` types it.
    ``status`` is the HTTP status to send the object with (0 means unset) and
    never appears on the wire.
    """

    type: str = ""
    id: str = ""
    attributes: bytes | None = None
    links: dict[str, Link] = Field(default_factory=dict)
    relationships: dict[str, Relationship] = Field(default_factory=dict)
    status: int = Field(default=0, exclude=True)

    @field_validator("type", "id", mode="before")
    @classmethod
    def _null_string(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("links", "relationships", mode="before")
    @classmethod
    def _null_mapping(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("attributes", mode="before")
    @classmethod
    def _encode_attributes(cls, value: Any) -> bytes | None:
        try:
            return encode_attributes(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"attributes are not valid JSON: {exc}") from exc

    @field_serializer("attributes")
    def _decode_attributes(self, value: bytes | None) -> Any:
        if value is None:
            return None
        return json.loads(value)

    @model_serializer(mode="wrap")
    def _drop_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        resource = handler(self)
        if not resource.get("id"):
            resource.pop("id", None)
        if resource.get("attributes") is None:
            resource.pop("attributes", None)
        for key in ("links", "relationships"):
            if not resource.get(key):
                resource.pop(key, None)
        return resource

    @classmethod
    def new(cls, resource_id: str, resource_type: str, attributes: Any = None) -> ResourceObject:
        """Build an object from business data, raising an internal error on failure."""
        obj = cls(id=resource_id, type=resource_type)
        obj.marshal(attributes)
        return obj

    def marshal(self, attributes: Any) -> None:
        """Replace the attributes with the encoding of ``attributes``."""
        try:
            self.attributes = encode_attributes(attributes)
        except (TypeError, ValueError) as exc:
            raise internal_error(f"Unable to marshal attributes for '{self.type}': {exc}") from exc

    def unmarshal(self, expected_type: str, model: type[ModelT]) -> ModelT:
        """Decode the attributes into ``model`` and validate its fields.

        Field failures become 422 errors pointing at the field; several failures
        are raised together as an ``ErrorList``.
        """
        if self.type != expected_type:
            raise internal_error(
                f"Expected type '{expected_type}' when converting object, got '{self.type}'"
            )
        try:
            raw = json.loads(self.attributes) if self.attributes is not None else {}
        except ValueError as exc:
            raise internal_error(f"Unable to decode attributes of '{self.type}': {exc}") from exc

        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            errors = ErrorList(
                input_error(error["msg"], "/".join(str(part) for part in error["loc"]))
                for error in exc.errors()
            )
            if len(errors) == 1:
                raise errors[0] from exc
            raise errors from exc

    def validate(self, method: str | Verb, response: bool = False) -> None:
        """Check identity fields and, for responses, resolve the HTTP status."""
        verb = resolve_verb(method)

        if not self.id and (response or verb is not Verb.CREATE):
            raise specification_error("ID must be set for Object")
        if not self.type:
            raise specification_error("Type must be set for Object")

        if not response:
            return
        if verb is Verb.DELETE:
            raise specification_error(
                f"The JSON Specification does not accept '{verb.value}' requests."
            )
        if verb is Verb.READ:
            self.status = DEFAULT_STATUSES[verb]
        elif self.status == 0:
            self.status = DEFAULT_STATUSES[verb]
        elif self.status not in ACCEPTED_STATUSES[verb]:
            accepted = ", ".join(str(status) for status in sorted(ACCEPTED_STATUSES[verb]))
            raise specification_error(
                f"{verb.value} Status must be one of {accepted}, got {self.status}."
            )
