"""Async REST client for the profile backend: bearer auth, GET de-duplication, error-response hooks."""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional

import httpx

from config import API_URL, DEDUP_WINDOW_SECONDS, HTTP_TIMEOUT_SECONDS, TOKEN_STORAGE_KEY
from services.session import LocalStorage
from utils.errors import ApiError, AuthenticationExpiredError
from utils.logger import get_logger

logger = get_logger(__name__)

ResponseHook = Callable[[httpx.Response], None]


def request_key(method: str, url: str, params: Optional[Dict[str, Any]] = None) -> str:
    """De-duplication key: method, URL and serialized params."""
    return f"{method.lower()}:{url}:{json.dumps(params or {}, sort_keys=True, default=str)}"


def _safe_json(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            if payload.get(key):
                return str(payload[key])
    if isinstance(payload, str) and payload.strip():
        return payload.strip()[:200]
    return None


class BearerTokenAuth(httpx.Auth):
    """Reads the token fresh from storage on every request."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    def auth_flow(self, request: httpx.Request):
        token = self._storage.get_item(TOKEN_STORAGE_KEY)
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
            logger.debug("Adding token to request: %s", request.url.path)
        else:
            logger.warning("No token available for request: %s", request.url.path)
        yield request


class ApiClient:
    """
    Thin wrapper over httpx.AsyncClient.

    Identical GET requests (same method, URL and params) issued while one is in
    flight share its outcome instead of hitting the network again. Entries leave
    the pending map on settlement or after DEDUP_WINDOW_SECONDS, whichever comes
    first; the window is a performance heuristic, not a consistency guarantee.
    Non-GET requests are never de-duplicated.
    """

    def __init__(
        self,
        storage: LocalStorage,
        base_url: str = API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        dedup_window: float = DEDUP_WINDOW_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            auth=BearerTokenAuth(storage),
            headers={"Accept": "application/json"},
            transport=transport,
        )
        self._dedup_window = dedup_window
        self._pending: Dict[str, asyncio.Future] = {}
        self._response_hooks: List[ResponseHook] = []

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ----- interceptors -----

    def add_response_hook(self, hook: ResponseHook) -> ResponseHook:
        """Register a hook called with every error response. Returns the hook for later removal."""
        self._response_hooks.append(hook)
        return hook

    def remove_response_hook(self, hook: ResponseHook) -> None:
        if hook in self._response_hooks:
            self._response_hooks.remove(hook)

    def _run_response_hooks(self, response: httpx.Response) -> None:
        for hook in list(self._response_hooks):
            hook(response)

    # ----- requests -----

    @property
    def pending_keys(self) -> List[str]:
        return list(self._pending.keys())

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", url, params=params)

    async def post(self, url: str, json: Any = None) -> Any:
        return await self.request("POST", url, json=json)

    async def put(self, url: str, json: Any = None) -> Any:
        return await self.request("PUT", url, json=json)

    async def delete(self, url: str) -> Any:
        return await self.request("DELETE", url)

    async def upload(self, url: str, files: Dict[str, Any], data: Optional[Dict[str, Any]] = None) -> Any:
        """Multipart POST; never de-duplicated."""
        return await self._send("POST", url, files=files, data=data)

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        method = method.upper()
        if method != "GET":
            return await self._send(method, url, params=params, json=json)

        key = request_key(method, url, params)
        pending = self._pending.get(key)
        if pending is not None:
            logger.info("Deduplicating request: %s", key)
            return await asyncio.shield(pending)

        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        self._pending[key] = future
        loop.call_later(self._dedup_window, self._expire, key, future)
        try:
            result = await self._send(method, url, params=params)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            future.exception()  # mark retrieved when nobody else was waiting
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._expire(key, future)

    def _expire(self, key: str, future: asyncio.Future) -> None:
        if self._pending.get(key) is future:
            del self._pending[key]

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ApiError(f"Request failed: {e}", url=url) from e

        if response.is_error:
            self._run_response_hooks(response)
            payload = _safe_json(response)
            message = _error_message(payload) or f"HTTP {response.status_code} for {method} {url}"
            if response.status_code == 401:
                logger.error("Authentication error. Token may be invalid.")
                raise AuthenticationExpiredError(message, 401, payload, url)
            logger.warning("%s %s returned %s: %s", method, url, response.status_code, message)
            raise ApiError(message, response.status_code, payload, url)

        return _safe_json(response)
