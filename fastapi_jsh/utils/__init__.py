"""Utilities for JSON:API header parsing."""

from .content_negotiation import MediaType, accepts_jsonapi, get_header, parse_media_type

__all__ = ["MediaType", "accepts_jsonapi", "get_header", "parse_media_type"]
