"""Storage interface consumed by JSON:API endpoints."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from fastapi import Request

from fastapi_jsh.schemas.resource import ResourceObject


@runtime_checkable
class CRUDStorage(Protocol):
    """Storage backend for one resource type.

    Every call receives the current request as its context handle. Failures are
    raised as ``JSHError`` (for example ``not_found``) and sent unchanged.
    """

    async def create(self, request: Request, obj: ResourceObject) -> ResourceObject:
        """Persist a new object and return it with its assigned id."""
        ...

    async def get(self, request: Request, resource_id: str) -> ResourceObject:
        """Return the object with the given id."""
        ...

    async def list(self, request: Request) -> list[ResourceObject]:
        """Return every stored object."""
        ...

    async def update(self, request: Request, obj: ResourceObject) -> ResourceObject:
        """Apply an update and return the resulting object."""
        ...

    async def delete(self, request: Request, resource_id: str) -> None:
        """Remove the object with the given id."""
        ...
