from __future__ import annotations

from typing import Any, Dict

from client.api import ApiClient, raise_for_api_error


class AuthApi:
    """Typed-ish wrappers around the ``/auth`` endpoints."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def signup(self, email: str, password: str) -> Dict[str, Any]:
        response = await self.api.post_public("/auth/signup", json={"email": email, "password": password})
        return raise_for_api_error(response).json()

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Tokens + user, or ``{"requires2FA": true, "userId": ...}``."""
        response = await self.api.post_public("/auth/login", json={"email": email, "password": password})
        return raise_for_api_error(response).json()

    async def verify_2fa(self, user_id: str, token: str) -> Dict[str, Any]:
        response = await self.api.post_public("/auth/2fa/verify", json={"userId": user_id, "token": token})
        return raise_for_api_error(response).json()

    async def enable_2fa(self) -> Dict[str, Any]:
        return raise_for_api_error(await self.api.post("/auth/2fa/enable")).json()

    async def disable_2fa(self) -> Dict[str, Any]:
        return raise_for_api_error(await self.api.post("/auth/2fa/disable")).json()

    async def me(self) -> Dict[str, Any]:
        return raise_for_api_error(await self.api.get("/auth/me")).json()
