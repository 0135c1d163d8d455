"""Request payload parsing into validated JSON:API documents."""

from __future__ import annotations

import json
import logging
from typing import IO, Any, Mapping

from fastapi import Request
from pydantic import ValidationError

from fastapi_jsh.core.constants import CONTENT_TYPE, Verb
from fastapi_jsh.core.document import Document, DocumentMode
from fastapi_jsh.core.errors import (
    ErrorList,
    ErrorObject,
    input_error,
    internal_error,
    resolve_verb,
    specification_error,
)
from fastapi_jsh.schemas.link import Links
from fastapi_jsh.schemas.resource import ResourceObject
from fastapi_jsh.settings import Settings, get_settings
from fastapi_jsh.utils.content_negotiation import get_header, parse_media_type

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


def validate_content_type(headers: Mapping[str, str]) -> None:
    """Raise a 406 error unless the request declares the JSON:API media type."""
    content_type = get_header(headers, "content-type")
    if not parse_media_type(content_type).is_jsonapi:
        raise specification_error(
            f"Expected Content-Type header to be {CONTENT_TYPE}, got: {content_type}"
        )


def payload_too_large(max_bytes: int) -> ErrorObject:
    """Return a 413 error for payloads above the size limit."""
    return ErrorObject(
        title="Request Entity Too Large",
        detail=f"Request payload exceeds the maximum size of {max_bytes} bytes",
        status=413,
    )


def read_payload(payload: bytes | IO[bytes], max_bytes: int) -> bytes:
    """Read a payload, refusing anything larger than ``max_bytes``."""
    if isinstance(payload, (bytes, bytearray)):
        if len(payload) > max_bytes:
            raise payload_too_large(max_bytes)
        return bytes(payload)

    chunks: list[bytes] = []
    size = 0
    while True:
        try:
            chunk = payload.read(min(READ_CHUNK_SIZE, max_bytes - size + 1))
        except OSError as exc:
            raise internal_error(f"Error attempting to read request body: {exc}") from exc
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise payload_too_large(max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


async def read_request_body(request: Request, max_bytes: int) -> bytes:
    """Stream a request body, refusing anything larger than ``max_bytes``."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise payload_too_large(max_bytes)

    chunks: list[bytes] = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > max_bytes:
            raise payload_too_large(max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


def _decode_object(raw: Any, member: str) -> ResourceObject:
    if not isinstance(raw, Mapping):
        raise internal_error(f"Unable to parse {member}: expected a JSON object, got {raw!r}")
    try:
        return ResourceObject.model_validate(raw)
    except ValidationError as exc:
        raise internal_error(f"Unable to parse {member}: {exc}") from exc


def decode_document(byte_data: bytes) -> Document:
    """Decode raw JSON into a document without semantic validation."""
    try:
        raw = json.loads(byte_data)
    except ValueError as exc:
        logger.debug("Rejected undecodable payload: %r", byte_data[:256])
        raise internal_error(f"Unable to parse json: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise internal_error(f"Unable to parse json: top level must be an object, got {raw!r}")

    data = raw.get("data")
    errors = raw.get("errors")
    if data is not None and errors is not None:
        raise specification_error("A document cannot contain both `data` and `errors`")

    if errors is not None:
        document = Document(DocumentMode.ERROR)
        if not isinstance(errors, list):
            raise internal_error(f"Unable to parse errors: expected an array, got {errors!r}")
        try:
            document.errors = ErrorList(ErrorObject.from_dict(error) for error in errors)
        except (TypeError, ValueError) as exc:
            raise internal_error(f"Unable to parse errors: {exc}") from exc
        document.status = document.errors.status
    elif isinstance(data, list):
        document = Document(DocumentMode.COLLECTION)
        document.data = [_decode_object(item, "data") for item in data]
    else:
        document = Document(DocumentMode.SINGLE)
        if data is not None:
            document.data = [_decode_object(data, "data")]

    included = raw.get("included") or []
    if not isinstance(included, list):
        raise internal_error(f"Unable to parse included: expected an array, got {included!r}")
    document.included = [_decode_object(item, "included") for item in included]

    if raw.get("links") is not None:
        try:
            document.links = Links.model_validate(raw["links"])
        except ValidationError as exc:
            raise internal_error(f"Unable to parse links: {exc}") from exc
    document.meta = raw.get("meta")
    return document


class Parser:
    """Parse a JSON:API request payload for a given method and headers."""

    def __init__(
        self,
        method: str | Verb,
        headers: Mapping[str, str],
        payload: bytes | IO[bytes],
        *,
        settings: Settings | None = None,
    ) -> None:
        self.method = method
        self.headers = headers
        self.payload = payload
        self.settings = settings or get_settings()

    def document(self) -> Document:
        """Return the decoded document after structural input validation."""
        resolve_verb(self.method)
        validate_content_type(self.headers)
        byte_data = read_payload(self.payload, self.settings.max_payload_bytes)
        document = decode_document(byte_data)

        for obj in document.data:
            self._validate_input(obj)
        if (
            self.settings.require_collection_ids
            and document.mode is DocumentMode.COLLECTION
            and len(document.data) > 1
        ):
            # bulk creation without client ids is unsupported
            for obj in document.data:
                if not obj.id:
                    raise input_error("Object without ID present in list", "id")
        return document

    def get_object(self, resource_id: str | None = None) -> ResourceObject:
        """Return the single object of the payload.

        The id is mandatory unless the request creates the resource; when
        ``resource_id`` (the id from the URL) is given it must match.
        """
        verb = resolve_verb(self.method)
        document = self.document()
        if document.mode is not DocumentMode.SINGLE:
            raise specification_error(
                f"Expected a single resource object, got a {document.mode.value} document"
            )
        obj = document.first()
        if obj is None:
            raise specification_error("Request document does not contain a resource object")

        if verb is not Verb.CREATE and not obj.id:
            raise input_error("Missing mandatory object attribute", "id")
        if resource_id is not None and obj.id != resource_id:
            raise input_error("Request ID does not match URL's", "id")
        return obj

    def get_list(self) -> list[ResourceObject]:
        """Return the objects of the payload; a single object becomes a list."""
        document = self.document()
        if document.mode is DocumentMode.ERROR:
            raise specification_error("Expected resource data, got an error document")
        return list(document.data)

    @staticmethod
    def _validate_input(obj: ResourceObject) -> None:
        if not obj.type:
            raise input_error("Missing mandatory object attribute", "type")


def parse_document(
    method: str | Verb,
    headers: Mapping[str, str],
    payload: bytes | IO[bytes],
    *,
    settings: Settings | None = None,
) -> Document:
    """Parse a payload into a document."""
    return Parser(method, headers, payload, settings=settings).document()


def parse_object(
    method: str | Verb,
    headers: Mapping[str, str],
    payload: bytes | IO[bytes],
    *,
    resource_id: str | None = None,
    settings: Settings | None = None,
) -> ResourceObject:
    """Parse a payload holding exactly one resource object."""
    return Parser(method, headers, payload, settings=settings).get_object(resource_id)


def parse_list(
    method: str | Verb,
    headers: Mapping[str, str],
    payload: bytes | IO[bytes],
    *,
    settings: Settings | None = None,
) -> list[ResourceObject]:
    """Parse a payload holding a collection of resource objects."""
    return Parser(method, headers, payload, settings=settings).get_list()


async def parse_request_object(
    request: Request,
    resource_id: str | None = None,
    *,
    settings: Settings | None = None,
) -> ResourceObject:
    """Parse the single resource object of a FastAPI request."""
    settings = settings or get_settings()
    validate_content_type(request.headers)
    body = await read_request_body(request, settings.max_payload_bytes)
    return parse_object(
        request.method, request.headers, body, resource_id=resource_id, settings=settings
    )


async def parse_request_list(
    request: Request,
    *,
    settings: Settings | None = None,
) -> list[ResourceObject]:
    """Parse the resource collection of a FastAPI request."""
    settings = settings or get_settings()
    validate_content_type(request.headers)
    body = await read_request_body(request, settings.max_payload_bytes)
    return parse_list(request.method, request.headers, body, settings=settings)
