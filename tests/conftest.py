from __future__ import annotations

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from fastapi_jsh import (
    Document,
    ResourceObject,
    Settings,
    configure,
    not_found,
    parse_request_list,
    parse_request_object,
    send,
    send_document,
)
from fastapi_jsh.middleware import ContentNegotiationMiddleware, ErrorHandlerMiddleware


@pytest.fixture(autouse=True)
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Start every test from default settings."""
    monkeypatch.delenv("JSH_MAX_PAYLOAD_BYTES", raising=False)
    monkeypatch.delenv("JSH_INCLUDE_JSONAPI_OBJECT", raising=False)
    return configure()


class MockStorage:
    """In-memory storage for a single resource type, recording every call."""

    def __init__(self, resource_type: str = "user", first_id: int = 42) -> None:
        self.resource_type = resource_type
        self.objects: dict[str, ResourceObject] = {}
        self.calls: list[str] = []
        self._next_id = first_id

    async def create(self, request: Request, obj: ResourceObject) -> ResourceObject:
        self.calls.append("create")
        obj.id = str(self._next_id)
        self._next_id += 1
        self.objects[obj.id] = obj
        return obj

    async def get(self, request: Request, resource_id: str) -> ResourceObject:
        self.calls.append("get")
        if resource_id not in self.objects:
            raise not_found(self.resource_type, resource_id)
        return self.objects[resource_id]

    async def list(self, request: Request) -> list[ResourceObject]:
        self.calls.append("list")
        return list(self.objects.values())

    async def update(self, request: Request, obj: ResourceObject) -> ResourceObject:
        self.calls.append("update")
        if obj.id not in self.objects:
            raise not_found(self.resource_type, obj.id)
        self.objects[obj.id] = obj
        return obj

    async def delete(self, request: Request, resource_id: str) -> None:
        self.calls.append("delete")
        if self.objects.pop(resource_id, None) is None:
            raise not_found(self.resource_type, resource_id)


def build_app(storage: MockStorage) -> FastAPI:
    app = FastAPI()
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(ContentNegotiationMiddleware)
    prefix = f"/{storage.resource_type}s"

    @app.post(prefix)
    async def create(request: Request):
        obj = await parse_request_object(request)
        return send(await storage.create(request, obj), request.method)

    @app.get(prefix)
    async def list_all(request: Request):
        return send(await storage.list(request), request.method)

    @app.post(f"{prefix}/bulk")
    async def bulk(request: Request):
        objects = await parse_request_list(request)
        return send(objects, "GET")

    @app.get(f"{prefix}/{{resource_id}}")
    async def get(request: Request, resource_id: str):
        return send(await storage.get(request, resource_id), request.method)

    @app.patch(f"{prefix}/{{resource_id}}")
    async def update(request: Request, resource_id: str):
        obj = await parse_request_object(request, resource_id)
        return send(await storage.update(request, obj), request.method)

    @app.delete(f"{prefix}/{{resource_id}}")
    async def delete(request: Request, resource_id: str):
        await storage.delete(request, resource_id)
        return send_document(Document.no_content(), request.method)

    @app.get("/broken")
    async def broken(request: Request):
        raise RuntimeError("database password leaked here")

    return app


@pytest.fixture
def storage() -> MockStorage:
    return MockStorage()


@pytest.fixture
def client(storage: MockStorage) -> TestClient:
    return TestClient(build_app(storage))
