"""Response rendering for JSON:API payloads and documents."""

from __future__ import annotations

import json
import logging
from typing import Iterable

from starlette.responses import Response

from fastapi_jsh.core.constants import CONTENT_TYPE, Verb
from fastapi_jsh.core.document import Document, prepare
from fastapi_jsh.core.errors import JSHError
from fastapi_jsh.schemas.resource import ResourceObject
from fastapi_jsh.settings import Settings, get_settings

Sendable = Document | ResourceObject | Iterable[ResourceObject] | JSHError


class Sender:
    """Turn payloads into JSON:API responses.

    Sending never fails on invalid payloads: validation failures are sent as
    error documents, and an error that cannot itself be sent degrades to a
    fixed 500 body.
    """

    def __init__(
        self, settings: Settings | None = None, logger: logging.Logger | None = None
    ) -> None:
        self.settings = settings or get_settings()
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def send(self, payload: Sendable, method: str | Verb) -> Response:
        """Validate ``payload`` and send it, or send the validation error instead."""
        try:
            document = prepare(payload, method)
        except JSHError as exc:
            self._log_error(exc, "Payload failed validation")
            try:
                document = prepare(exc, method)
            except JSHError as fatal:
                self.logger.critical(
                    "Unable to send error response %r: %s", exc, fatal.internal_messages
                )
                return self._fatal_response()
        return self.send_document(document, method)

    def send_document(self, document: Document, method: str | Verb) -> Response:
        """Validate and send a document, substituting an error document on failure."""
        try:
            document.validate(method, response=True, settings=self.settings)
        except JSHError as exc:
            self._log_error(exc, "Document failed validation")
            document = Document.build(exc)
            try:
                document.validate(method, response=True, settings=self.settings)
            except JSHError as fatal:
                self.logger.critical(
                    "Unable to send error response %r: %s", exc, fatal.internal_messages
                )
                return self._fatal_response()

        if document.has_errors() and document.status >= 500:
            self._log_error(document.errors, "Returning internal server error")

        status, body = self.render(document)
        if document.empty:
            return Response(status_code=status)
        return Response(content=body, status_code=status, media_type=CONTENT_TYPE)

    def render(self, document: Document) -> tuple[int, bytes]:
        """Return the status and serialized body of a document."""
        return document.status, document.dumps(self.settings)

    def _log_error(self, error: JSHError, message: str) -> None:
        if error.status >= 500:
            self.logger.error("%s: %s (%s)", message, error, error.internal_messages)
        else:
            self.logger.info("%s: %s", message, error)

    def _fatal_response(self) -> Response:
        body = {
            "errors": [
                {
                    "title": self.settings.default_error_title,
                    "detail": self.settings.default_error_detail,
                    "status": "500",
                }
            ]
        }
        return Response(
            content=json.dumps(body, separators=(",", ":")).encode("utf-8"),
            status_code=500,
            media_type=CONTENT_TYPE,
        )


def send(payload: Sendable, method: str | Verb) -> Response:
    """Send a payload with the default sender."""
    return Sender().send(payload, method)


def send_document(document: Document, method: str | Verb) -> Response:
    """Send a document with the default sender."""
    return Sender().send_document(document, method)
