"""Pydantic schemas for resource linkage and relationships."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer

from .link import Links


class ResourceIdentifier(BaseModel):
    """Resource identifier object: type + id."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(min_length=1)
    id: str


class Relationship(BaseModel):
    """Relationship object; ``data`` is always held as a list of identifiers.

    The to-one shape is not kept: linkage that arrived as a single object or
    as null is sent back as an array (``[]`` for null).
    """

    links: Links | None = None
    data: list[ResourceIdentifier] = Field(default_factory=list)
    meta: dict[str, Any] | None = None

    @field_validator("data", mode="before")
    @classmethod
    def _normalize_linkage(cls, value: Any) -> Any:
        # to-one linkage arrives as a bare object (or null)
        if value is None:
            return []
        if isinstance(value, (Mapping, ResourceIdentifier)):
            return [value]
        return value

    @model_serializer
    def _serialize(self) -> dict[str, Any]:
        relationship: dict[str, Any] = {}
        if self.links is not None:
            relationship["links"] = self.links.model_dump()
        relationship["data"] = [identifier.model_dump() for identifier in self.data]
        if self.meta:
            relationship["meta"] = self.meta
        return relationship
