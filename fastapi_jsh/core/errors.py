"""JSON:API error objects and error lists."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

from fastapi_jsh.core.constants import Verb
from fastapi_jsh.settings import get_settings

ATTRIBUTE_POINTER_PREFIX = "/data/attributes/"


class JSHError(Exception):
    """Base class for errors that can be sent as a JSON:API error document."""

    @property
    def status(self) -> int:
        """Return the HTTP status the error should be sent with."""
        raise NotImplementedError

    def validate(self) -> None:
        """Raise an error if this error cannot be sent as-is."""
        raise NotImplementedError

    def to_list(self) -> list[ErrorObject]:
        """Return the contained error objects in order."""
        raise NotImplementedError

    @property
    def internal_messages(self) -> list[str]:
        """Return private diagnostics of the contained errors."""
        return [error.internal_message for error in self.to_list() if error.internal_message]


class ErrorObject(JSHError):
    """A single JSON:API error object.

    ``internal_message`` is for operators only: it is logged by the sender and
    never serialized or included in ``str(error)``.
    """

    def __init__(
        self,
        *,
        title: str = "",
        detail: str = "",
        status: int = 0,
        source_pointer: str = "",
        internal_message: str = "",
    ) -> None:
        super().__init__(title, detail, status)
        self.title = title
        self.detail = detail
        self._status = status
        self.source_pointer = source_pointer
        self.internal_message = internal_message

    @property
    def status(self) -> int:
        return self._status

    @status.setter
    def status(self, value: int) -> None:
        self._status = value

    def __str__(self) -> str:
        return f"{self.title}: {self.detail}"

    def __repr__(self) -> str:
        return (
            f"ErrorObject(status={self.status!r}, title={self.title!r}, "
            f"detail={self.detail!r}, source_pointer={self.source_pointer!r})"
        )

    def validate(self) -> None:
        """Check the status range and the 422 source pointer requirement."""
        if self.status < 400 or self.status >= 600:
            raise internal_error(f"Invalid HTTP status for error {self!r}")
        if self.status == 422 and not self.source_pointer:
            raise internal_error("Source pointer must be set for 422 status errors")

    def to_list(self) -> list[ErrorObject]:
        return [self]

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON:API wire form of the error."""
        error: dict[str, Any] = {}
        if self.title:
            error["title"] = self.title
        if self.detail:
            error["detail"] = self.detail
        error["status"] = str(self.status)
        if self.source_pointer:
            error["source"] = {"pointer": self.source_pointer}
        return error

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ErrorObject:
        """Decode an error object; status may be a string or a number."""
        if not isinstance(data, Mapping):
            raise ValueError(f"error object must be a JSON object, got {type(data).__name__}")
        status = data.get("status", 0)
        if isinstance(status, bool):
            raise ValueError(f"invalid error status {status!r}")
        source = data.get("source") or {}
        if not isinstance(source, Mapping):
            raise ValueError("error source must be a JSON object")
        return cls(
            title=str(data.get("title") or ""),
            detail=str(data.get("detail") or ""),
            status=int(status or 0),
            source_pointer=str(source.get("pointer") or ""),
        )


class ErrorList(JSHError):
    """An ordered list of error objects; the first one decides the status."""

    def __init__(self, errors: Iterable[ErrorObject] = ()) -> None:
        self.errors: list[ErrorObject] = []
        self.extend(errors)
        super().__init__(self.errors)

    def __iter__(self) -> Iterator[ErrorObject]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __getitem__(self, index: int) -> ErrorObject:
        return self.errors[index]

    def __str__(self) -> str:
        return "; ".join(str(error) for error in self.errors)

    def __repr__(self) -> str:
        return f"ErrorList({self.errors!r})"

    def append(self, error: ErrorObject) -> None:
        self.errors.append(error)

    def extend(self, errors: Iterable[ErrorObject]) -> None:
        for error in errors:
            self.errors.extend(error.to_list())

    @property
    def status(self) -> int:
        return self.errors[0].status if self.errors else 0

    def validate(self) -> None:
        """Validate members in order, stopping at the first invalid one."""
        if not self.errors:
            raise internal_error("No errors provided for attempted error response")
        for error in self.errors:
            error.validate()

    def to_list(self) -> list[ErrorObject]:
        return list(self.errors)


def internal_error(message: str) -> ErrorObject:
    """Return a generic 500 error carrying a private diagnostic message."""
    settings = get_settings()
    return ErrorObject(
        title=settings.default_error_title,
        detail=settings.default_error_detail,
        status=500,
        internal_message=message,
    )


def input_error(detail: str, attribute: str) -> ErrorObject:
    """Return a 422 error pointing at the offending attribute."""
    return ErrorObject(
        title="Invalid Attribute",
        detail=detail,
        status=422,
        source_pointer=f"{ATTRIBUTE_POINTER_PREFIX}{attribute.lower()}",
    )


def specification_error(detail: str) -> ErrorObject:
    """Return a 406 error for requests violating the JSON:API specification."""
    return ErrorObject(title="JSON API Specification Error", detail=detail, status=406)


def not_found(resource_type: str, resource_id: str) -> ErrorObject:
    """Return a 404 error naming the missing resource."""
    return ErrorObject(
        title="Not Found",
        detail=f"No resource of type '{resource_type}' exists for ID: {resource_id}",
        status=404,
    )


def resolve_verb(method: str | Verb) -> Verb:
    """Return the verb for an HTTP method or raise a 406 specification error."""
    try:
        return Verb.from_method(method)
    except ValueError:
        raise specification_error(
            f"The JSON Specification does not accept '{method}' requests."
        ) from None
