"""JSON:API error handling middleware."""

import logging
from typing import Any

from fastapi_jsh.core.errors import JSHError, internal_error
from fastapi_jsh.core.sender import Sender

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware:
    """Convert exceptions into JSON:API error documents."""

    def __init__(self, app: Any, sender: Sender | None = None) -> None:
        """Store the ASGI app for middleware chaining."""
        self.app = app
        self.sender = sender

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """Send raised JSHErrors as-is and anything else as a generic 500."""
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        sender = self.sender or Sender()
        try:
            await self.app(scope, receive, send)
        except JSHError as exc:
            response = sender.send(exc, method)
            await response(scope, receive, send)
        except Exception as exc:
            logger.exception("Unhandled exception while serving %s %s", method, scope.get("path"))
            response = sender.send(internal_error(f"{type(exc).__name__}: {exc}"), method)
            await response(scope, receive, send)
