"""Pydantic schemas for JSON:API."""

from .link import Link, Links
from .relationship import Relationship, ResourceIdentifier
from .resource import ResourceObject

__all__ = [
    "Link",
    "Links",
    "Relationship",
    "ResourceIdentifier",
    "ResourceObject",
]
