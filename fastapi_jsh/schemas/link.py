"""Pydantic schemas for JSON:API link objects."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator


class Link(BaseModel):
    """A link: a bare href string on the wire unless it carries metadata."""

    href: str = ""
    meta: dict[str, Any] | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"href": value}
        if isinstance(value, (Mapping, Link)):
            return value
        raise ValueError(f"link must be a string or an object, got {type(value).__name__}")

    @model_serializer
    def _serialize(self) -> str | dict[str, Any]:
        if not self.meta:
            return self.href
        return {"href": self.href, "meta": self.meta}


class Links(BaseModel):
    """Links object with ``self`` and ``related`` members."""

    model_config = ConfigDict(populate_by_name=True)

    self_link: Link | None = Field(default=None, alias="self")
    related: Link | None = None

    @model_serializer
    def _serialize(self) -> dict[str, Any]:
        links: dict[str, Any] = {}
        if self.self_link is not None:
            links["self"] = self.self_link.model_dump()
        if self.related is not None:
            links["related"] = self.related.model_dump()
        return links
