"""Bearer transport with a single shared refresh on 401."""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
import structlog

from client.config import ClientSettings
from client.errors import ApiError, SessionExpired
from client.storage import SessionStorage

logger = structlog.get_logger(__name__)

SessionExpiredHook = Callable[[], Awaitable[None]]
TokenRefreshedHook = Callable[[str], Awaitable[None]]


def error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


def raise_for_api_error(response: httpx.Response) -> httpx.Response:
    if response.is_success:
        return response
    raise ApiError(response.status_code, error_message(response))


class ApiClient:
    def __init__(
        self,
        storage: SessionStorage,
        settings: Optional[ClientSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_session_expired: Optional[SessionExpiredHook] = None,
        on_token_refreshed: Optional[TokenRefreshedHook] = None,
    ):
        settings = settings or ClientSettings()
        options: Dict[str, Any] = {
            "base_url": settings.API_BASE_URL,
            "timeout": settings.REQUEST_TIMEOUT_SECONDS,
            "headers": {"Content-Type": "application/json"},
        }
        if transport is not None:
            options["transport"] = transport
        self.storage = storage
        self.on_session_expired = on_session_expired
        self.on_token_refreshed = on_token_refreshed
        # authenticated calls; the refresh endpoint goes through ``_public`` so a
        # 401 from it can never loop back into another refresh
        self._http = httpx.AsyncClient(**options)
        self._public = httpx.AsyncClient(**options)
        self._refresh_lock = asyncio.Lock()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()
        await self._public.aclose()

    # --- unauthenticated ---
    async def post_public(self, url: str, json: Optional[dict] = None) -> httpx.Response:
        return await self._public.post(url, json=json)

    # --- authenticated ---
    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        token = await self.storage.get_access_token()
        response = await self._send(method, url, token, kwargs)
        if response.status_code != 401:
            return response

        fresh = await self._refresh_access_token(stale=token)
        # one retry only; a second 401 goes back to the caller as-is
        return await self._send(method, url, fresh, kwargs)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def _send(
        self, method: str, url: str, token: Optional[str], kwargs: Dict[str, Any]
    ) -> httpx.Response:
        options = dict(kwargs)
        headers = dict(options.pop("headers", None) or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return await self._http.request(method, url, headers=headers, **options)

    async def _refresh_access_token(self, stale: Optional[str]) -> str:
        async with self._refresh_lock:
            current = await self.storage.get_access_token()
            if current and current != stale:
                logger.debug("refresh_coalesced")
                return current

            refresh_token = await self.storage.get_refresh_token()
            if not refresh_token:
                # never signed in, or an earlier refresh in this burst already failed
                raise SessionExpired()

            try:
                response = await self._public.post("/auth/refresh", json={"refreshToken": refresh_token})
            except httpx.HTTPError as exc:
                logger.warning("refresh_failed", reason=type(exc).__name__)
                await self._expire_session()
                raise SessionExpired() from exc

            if response.status_code != 200:
                logger.info("refresh_failed", status_code=response.status_code)
                await self._expire_session()
                raise SessionExpired()

            try:
                body = response.json()
            except ValueError:
                body = None
            access_token = body.get("accessToken") if isinstance(body, dict) else None
            if not isinstance(access_token, str) or not access_token:
                logger.warning("refresh_failed", reason="unexpected_body")
                await self._expire_session()
                raise SessionExpired()

            rotated = body.get("refreshToken")
            await self.storage.save_tokens(access_token, rotated if isinstance(rotated, str) else None)
            logger.info("refresh_succeeded")
            if self.on_token_refreshed is not None:
                await self.on_token_refreshed(access_token)
            return access_token

    async def _expire_session(self) -> None:
        await self.storage.clear()
        if self.on_session_expired is not None:
            await self.on_session_expired()
