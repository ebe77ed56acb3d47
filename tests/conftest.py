"""Shared fixtures: per-test session state and an in-memory profile backend behind httpx.MockTransport."""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from services.auth import AuthSession
from services.http_client import ApiClient
from services.session import CookieJar, LocalStorage, Navigator

BASE_URL = "http://api.test"
HOST_URL = "https://harx.test/app1"
WIZARD_DOMAIN = "wizard.harx.test"


class FakeBackend:
    """Routes (method, path) to canned JSON responses and records every request it sees."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.delay = 0.0

    def on(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        """`body` may be a callable taking the request."""
        self.routes[(method.upper(), path)] = (status, body)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def json_of(self, request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})
        status, body = route
        if callable(body):
            body = body(request)
        return httpx.Response(status, json=body)


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path)


@pytest.fixture
def cookies(tmp_path) -> CookieJar:
    return CookieJar(tmp_path)


@pytest.fixture
def navigator() -> Navigator:
    return Navigator()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def make_client(storage, backend):
    """Factory for ApiClients wired to `backend`; all are closed after the test."""
    clients: List[ApiClient] = []

    def factory(handler: Optional[Callable] = None, **kwargs: Any) -> ApiClient:
        client = ApiClient(
            storage,
            base_url=BASE_URL,
            transport=httpx.MockTransport(handler or backend),
            **kwargs,
        )
        clients.append(client)
        return client

    yield factory
    for client in clients:
        await client.aclose()


@pytest.fixture
def client(make_client) -> ApiClient:
    return make_client()


@pytest.fixture
def auth(storage, cookies, navigator) -> AuthSession:
    return AuthSession(storage, cookies, navigator, host_app_url=HOST_URL, cookie_domain=WIZARD_DOMAIN)


@pytest.fixture
def logged_in(storage, cookies):
    """A user with both the userId cookie and a stored token."""
    storage.set_item("token", "token-abcdefghijkl")
    cookies.set("userId", "user-1", expires_days=7)
    return "user-1"
