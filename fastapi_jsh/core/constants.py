"""JSON:API media type, version and request verbs."""

from __future__ import annotations

from enum import Enum

CONTENT_TYPE = "application/vnd.api+json"
JSONAPI_VERSION = "1.1"


class Verb(str, Enum):
    """HTTP verbs understood by the document validators."""

    CREATE = "POST"
    READ = "GET"
    UPDATE = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def from_method(cls, method: str | Verb) -> Verb:
        """Return the verb for an HTTP method, raising ValueError if unsupported."""
        if isinstance(method, cls):
            return method
        return cls(str(method).upper())
