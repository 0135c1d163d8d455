"""JSON:API top-level document envelope."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from fastapi_jsh.core.constants import Verb
from fastapi_jsh.core.errors import (
    ErrorList,
    JSHError,
    internal_error,
    specification_error,
)
from fastapi_jsh.schemas.link import Links
from fastapi_jsh.schemas.resource import ResourceObject
from fastapi_jsh.settings import Settings, get_settings


class DocumentMode(str, Enum):
    """Shape of the document's primary data."""

    SINGLE = "single"
    COLLECTION = "collection"
    ERROR = "error"


class Document:
    """A JSON:API document holding either resource data or errors.

    ``mode`` decides how ``data`` is serialized: a single object (or null), an
    array (never null), or omitted in favour of ``errors``. ``empty`` marks a
    no-content response that is sent without a body.
    """

    def __init__(
        self,
        mode: DocumentMode = DocumentMode.SINGLE,
        *,
        links: Links | None = None,
        meta: Any = None,
        status: int = 0,
    ) -> None:
        self.mode = mode
        self.data: list[ResourceObject] = []
        self.errors = ErrorList()
        self.included: list[ResourceObject] = []
        self.links = links
        self.meta = meta
        self.status = status
        self.empty = False
        self.validated = False

    @classmethod
    def build(cls, payload: ResourceObject | Sequence[ResourceObject] | JSHError) -> Document:
        """Return a trusted document for an already validated payload."""
        if isinstance(payload, ResourceObject):
            document = cls(DocumentMode.SINGLE, status=payload.status)
            document.data = [payload]
        elif isinstance(payload, JSHError):
            document = cls(DocumentMode.ERROR)
            document.errors = ErrorList(payload.to_list())
            document.status = document.errors.status
        elif isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
            document = cls(DocumentMode.COLLECTION, status=200)
            document.data = list(payload)
        else:
            raise TypeError(f"Cannot build a document from {type(payload).__name__}")
        document.validated = True
        return document

    @classmethod
    def no_content(cls, status: int = 204) -> Document:
        """Return an empty document that is sent without a body."""
        document = cls(status=status)
        document.empty = True
        return document

    def has_data(self) -> bool:
        return len(self.data) > 0

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def first(self) -> ResourceObject | None:
        """Return the first data object, if any."""
        return self.data[0] if self.data else None

    def add_object(self, obj: ResourceObject) -> None:
        """Append a data object.

        A document without a status adopts the object's status; a collection
        falls back to 200 when the object has none. Validate an object before
        adding it to a single-object document so its status is resolved.
        """
        if self.mode is DocumentMode.ERROR or self.has_errors():
            raise internal_error("Cannot add data to a document already possessing errors")
        if self.mode is DocumentMode.SINGLE and self.has_data():
            raise internal_error("Cannot add data to a non-collection")
        if self.status == 0:
            self.status = obj.status
            if self.status == 0 and self.mode is DocumentMode.COLLECTION:
                self.status = 200
        self.data.append(obj)

    def add_error(self, error: JSHError) -> None:
        """Append an error (or all errors of a list), switching to error mode."""
        if self.has_data():
            raise internal_error("Cannot add an error to a document already possessing data")
        errors = error.to_list()
        if not errors or any(item.status == 0 for item in errors):
            raise specification_error("Status code must be set for an error")
        self.mode = DocumentMode.ERROR
        if self.status == 0:
            self.status = errors[0].status
        self.errors.extend(errors)

    def validate(
        self, method: str | Verb, response: bool = False, *, settings: Settings | None = None
    ) -> None:
        """Check the document invariants and, unless trusted, its contents."""
        settings = settings or get_settings()

        if self.status < 100 or self.status >= 600:
            raise internal_error(f"Response HTTP Status is outside of valid range: {self.status}")
        if self.empty:
            return

        if self.has_data() and self.has_errors():
            raise internal_error("Both `errors` and `data` cannot be set for a JSON response")
        if self.mode is DocumentMode.ERROR:
            if not self.has_errors():
                raise internal_error("Error document does not contain any errors")
        elif self.has_errors():
            raise internal_error(f"Errors present in a document in {self.mode.value} mode")
        elif self.mode is DocumentMode.SINGLE and not self.has_data():
            raise internal_error("Both `errors` and `data` cannot be blank for a JSON response")
        if self.mode is DocumentMode.SINGLE and len(self.data) > 1:
            raise internal_error("A single-object document cannot hold more than one object")
        if settings.included_requires_data and self.included and not self.has_data():
            raise internal_error("'included' should only be set for a response if 'data' is as well")

        if self.validated:
            return

        for obj in self.data:
            obj.validate(method, response)
        if self.has_errors():
            self.errors.validate()

    def to_dict(self, settings: Settings | None = None) -> dict[str, Any]:
        """Return the wire form of the document."""
        settings = settings or get_settings()
        document: dict[str, Any] = {}
        if self.mode is DocumentMode.SINGLE:
            first = self.first()
            document["data"] = first.model_dump() if first is not None else None
        elif self.mode is DocumentMode.COLLECTION:
            document["data"] = [obj.model_dump() for obj in self.data]
        elif self.mode is DocumentMode.ERROR:
            document["errors"] = [error.to_dict() for error in self.errors]
        if self.included:
            document["included"] = [obj.model_dump() for obj in self.included]
        if self.links is not None:
            document["links"] = self.links.model_dump()
        if self.meta is not None:
            document["meta"] = self.meta
        if settings.include_jsonapi_object:
            document["jsonapi"] = {"version": settings.jsonapi_version}
        return document

    def dumps(self, settings: Settings | None = None) -> bytes:
        """Return the serialized document; empty documents have no body."""
        if self.empty:
            return b""
        return json.dumps(
            self.to_dict(settings), separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")

    def __str__(self) -> str:
        return "Errors:" + "".join(f"\n{error};" for error in self.errors)

    def __repr__(self) -> str:
        return (
            f"Document(mode={self.mode.value!r}, status={self.status!r}, "
            f"data={len(self.data)}, errors={len(self.errors)})"
        )


def prepare(
    payload: Document | ResourceObject | Iterable[ResourceObject] | JSHError,
    method: str | Verb,
    *,
    response: bool = True,
) -> Document:
    """Validate a payload of any sendable kind and wrap it in a document."""
    if isinstance(payload, Document):
        return payload
    if isinstance(payload, ResourceObject):
        payload.validate(method, response)
        return Document.build(payload)
    if isinstance(payload, JSHError):
        payload.validate()
        return Document.build(payload)
    if not isinstance(payload, Iterable) or isinstance(payload, (str, bytes, Mapping)):
        raise internal_error(f"Cannot send {type(payload).__name__}")
    objects = list(payload)
    for obj in objects:
        if not isinstance(obj, ResourceObject):
            raise internal_error(f"Cannot send {type(obj).__name__} as a resource object")
        obj.validate(method, response)
    return Document.build(objects)
