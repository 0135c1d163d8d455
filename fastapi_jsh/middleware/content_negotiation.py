"""JSON:API content negotiation middleware."""

from typing import Any

from fastapi_jsh.core.errors import JSHError, specification_error
from fastapi_jsh.core.parser import validate_content_type
from fastapi_jsh.core.sender import Sender
from fastapi_jsh.utils.content_negotiation import accepts_jsonapi

BODY_METHODS = {"POST", "PATCH"}


class ContentNegotiationMiddleware:
    """Ensure JSON:API media type for requests and responses."""

    def __init__(self, app: Any, sender: Sender | None = None) -> None:
        """Store the ASGI app for middleware chaining."""
        self.app = app
        self.sender = sender

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """Validate JSON:API headers before passing to downstream app."""
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "").upper()
        headers = {
            k.decode("latin-1").lower(): v.decode("latin-1") for k, v in scope.get("headers", [])
        }

        try:
            if method in BODY_METHODS:
                validate_content_type(headers)
            accept = headers.get("accept", "")
            if not accepts_jsonapi(accept):
                raise specification_error(
                    f"Accept header does not allow application/vnd.api+json: {accept}"
                )
        except JSHError as exc:
            response = (self.sender or Sender()).send(exc, method)
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
