"""Helpers for JSON:API content negotiation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from fastapi_jsh.core.constants import CONTENT_TYPE


@dataclass
class MediaType:
    """A parsed media type with the JSON:API ``ext``/``profile`` parameters."""

    media_type: str
    ext: list[str] = field(default_factory=list)
    profile: list[str] = field(default_factory=list)
    other_params: dict[str, str] = field(default_factory=dict)

    @property
    def is_jsonapi(self) -> bool:
        """Return True for the bare JSON:API media type (ext/profile allowed)."""
        return self.media_type == CONTENT_TYPE and not self.other_params


def _split_parameters(value: str) -> list[str]:
    return [part.strip() for part in value.split(";") if part.strip()]


def _parse_param_value(value: str) -> list[str]:
    if value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    if not value:
        return []
    return value.split(" ")


def parse_media_type(content_type: str) -> MediaType:
    """Parse a media type header value and its parameters."""
    parts = _split_parameters(content_type)
    parsed = MediaType(media_type=parts[0].lower() if parts else "")

    for param in parts[1:]:
        if "=" not in param:
            continue
        name, raw_value = param.split("=", 1)
        name = name.strip().lower()
        raw_value = raw_value.strip()
        if name == "ext":
            parsed.ext = _parse_param_value(raw_value)
        elif name == "profile":
            parsed.profile = _parse_param_value(raw_value)
        else:
            parsed.other_params[name] = raw_value
    return parsed


def accepts_jsonapi(accept: str) -> bool:
    """Return True if an Accept header admits a JSON:API response."""
    if not accept.strip():
        return True
    for media_range in accept.split(","):
        parsed = parse_media_type(media_range)
        parsed.other_params.pop("q", None)
        if parsed.media_type in {"*/*", "application/*"} or parsed.is_jsonapi:
            return True
    return False


def get_header(headers: Mapping[str, str], name: str) -> str:
    """Case-insensitive header lookup on plain mappings and starlette headers."""
    value = headers.get(name)
    if value is not None:
        return value
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return ""
