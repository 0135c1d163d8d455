"""ASGI middleware that answers failures with JSON:API error documents."""

from .content_negotiation import ContentNegotiationMiddleware
from .error_handler import ErrorHandlerMiddleware

__all__ = ["ContentNegotiationMiddleware", "ErrorHandlerMiddleware"]
