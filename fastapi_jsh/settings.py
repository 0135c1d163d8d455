"""Process-wide configuration for JSON:API document handling."""

from __future__ import annotations

from typing import Any

from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

from fastapi_jsh.core.constants import JSONAPI_VERSION


class Settings(BaseSettings):
    """JSON:API handling settings.

    Values are read from ``JSH_``-prefixed environment variables or a ``.env``
    file. Configure once at startup and treat the result as read-only; the
    library does not guard concurrent writers.
    """

    model_config = SettingsConfigDict(env_prefix="JSH_", env_file=".env", extra="ignore")

    default_error_title: str = "Internal Server Error"
    default_error_detail: str = "Request failed, something went wrong."
    include_jsonapi_object: bool = True
    jsonapi_version: str = JSONAPI_VERSION
    max_payload_bytes: PositiveInt = 10 * 1024 * 1024
    require_collection_ids: bool = True
    included_requires_data: bool = True


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure(settings: Settings | None = None, **overrides: Any) -> Settings:
    """Replace the process-wide settings.

    Either pass a complete ``Settings`` instance or keyword overrides applied on
    top of the environment defaults.
    """
    global _settings
    if settings is None:
        settings = Settings(**overrides)
    elif overrides:
        settings = settings.model_copy(update=overrides)
    _settings = settings
    return settings
