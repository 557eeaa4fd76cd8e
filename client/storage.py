"""Session persistence over the device's secure key-value store."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional, Protocol

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"


class SecureStore(Protocol):
    async def get_item(self, key: str) -> Optional[str]: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def delete_item(self, key: str) -> None: ...


class MemorySecureStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def delete_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)


class SessionStorage:
    def __init__(self, store: SecureStore):
        self.store = store

    async def save_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        await self.store.set_item(ACCESS_TOKEN_KEY, access_token)
        # refresh answers carry no new refresh token: keep the one on file
        if refresh_token:
            await self.store.set_item(REFRESH_TOKEN_KEY, refresh_token)

    async def get_access_token(self) -> Optional[str]:
        return await self.store.get_item(ACCESS_TOKEN_KEY)

    async def get_refresh_token(self) -> Optional[str]:
        return await self.store.get_item(REFRESH_TOKEN_KEY)

    async def save_user(self, user: Dict[str, Any]) -> None:
        await self.store.set_item(USER_KEY, json.dumps(user))

    async def get_user(self) -> Optional[Dict[str, Any]]:
        raw = await self.store.get_item(USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return user if isinstance(user, dict) else None

    async def clear(self) -> None:
        for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY):
            await self.store.delete_item(key)
