"""Core JSON:API document, error, parsing and sending helpers."""

from .constants import CONTENT_TYPE, JSONAPI_VERSION, Verb
from .document import Document, DocumentMode, prepare
from .errors import (
    ErrorList,
    ErrorObject,
    JSHError,
    input_error,
    internal_error,
    not_found,
    specification_error,
)
from .parser import (
    Parser,
    parse_document,
    parse_list,
    parse_object,
    parse_request_list,
    parse_request_object,
    validate_content_type,
)
from .sender import Sender, send, send_document

__all__ = [
    "CONTENT_TYPE",
    "JSONAPI_VERSION",
    "Verb",
    "Document",
    "DocumentMode",
    "prepare",
    "ErrorList",
    "ErrorObject",
    "JSHError",
    "input_error",
    "internal_error",
    "not_found",
    "specification_error",
    "Parser",
    "parse_document",
    "parse_list",
    "parse_object",
    "parse_request_list",
    "parse_request_object",
    "validate_content_type",
    "Sender",
    "send",
    "send_document",
]
