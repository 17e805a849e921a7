# tests/conftest.py
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from stockdesk.main import app
from stockdesk.utils.api_client import InventoryApiClient, get_api_client

from _helpers import PROFILE, make_token

BACKEND_URL = "http://backend.test/api/v1"

Reply = Union[Tuple[int, Any], Callable[[httpx.Request], httpx.Response]]


class FakeBackend:
    """In-memory stand-in for the inventory REST API.

    Routes are keyed by (method, path relative to /api/v1). Every request is
    recorded so tests can inspect what was forwarded.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Reply] = {("GET", "/profile"): (200, PROFILE)}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, body: Any = None):
        self.routes[(method, path)] = (status, body)

    def on_call(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]):
        self.routes[(method, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/api/v1"):]
        reply = self.routes.get((request.method, path))
        if reply is None:
            return httpx.Response(404, json={"error": f"no route {request.method} {path}"})
        if callable(reply):
            return reply(request)
        status, body = reply
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def sent(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == f"/api/v1{path}"]

    def sent_json(self, method: str, path: str) -> List[Any]:
        return [json.loads(r.content) for r in self.sent(method, path)]


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def api(backend: FakeBackend) -> InventoryApiClient:
    return InventoryApiClient(base_url=BACKEND_URL, timeout=5, transport=httpx.MockTransport(backend.handle))


@pytest.fixture()
def client(api: InventoryApiClient):
    app.dependency_overrides[get_api_client] = lambda: api
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def token() -> str:
    return make_token()


@pytest.fixture()
def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}