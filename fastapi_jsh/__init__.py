"""FastAPI JSON:API v1.1 document parsing, validation and sending."""

import logging

from .core.constants import CONTENT_TYPE, Verb
from .core.document import Document, DocumentMode
from .core.errors import (
    ErrorList,
    ErrorObject,
    JSHError,
    input_error,
    internal_error,
    not_found,
    specification_error,
)
from .core.parser import Parser, parse_list, parse_object, parse_request_list, parse_request_object
from .core.sender import Sender, send, send_document
from .schemas import Link, Links, Relationship, ResourceIdentifier, ResourceObject
from .settings import Settings, configure, get_settings

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CONTENT_TYPE",
    "Verb",
    "Document",
    "DocumentMode",
    "ErrorList",
    "ErrorObject",
    "JSHError",
    "input_error",
    "internal_error",
    "not_found",
    "specification_error",
    "Parser",
    "parse_list",
    "parse_object",
    "parse_request_list",
    "parse_request_object",
    "Sender",
    "send",
    "send_document",
    "Link",
    "Links",
    "Relationship",
    "ResourceIdentifier",
    "ResourceObject",
    "Settings",
    "configure",
    "get_settings",
]
