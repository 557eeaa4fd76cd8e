"""Biometric unlock of the session already in secure storage. Never talks to the server."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Protocol

import structlog

from client.config import ClientSettings
from client.errors import BiometricUnavailable, ClientError
from client.storage import SecureStore, SessionStorage

logger = structlog.get_logger(__name__)


class BiometricType(enum.Enum):
    FINGERPRINT = "fingerprint"
    FACIAL_RECOGNITION = "facial_recognition"
    IRIS = "iris"
    OTHER = "other"


_LABELS = {
    BiometricType.FINGERPRINT: "Fingerprint",
    BiometricType.FACIAL_RECOGNITION: "Face ID",
    BiometricType.IRIS: "Iris",
}


class BiometricAuthenticator(Protocol):
    """OS biometric API. Implementations raise ``BiometricUnavailable`` on device errors."""

    async def has_hardware(self) -> bool: ...

    async def is_enrolled(self) -> bool: ...

    async def supported_types(self) -> List[BiometricType]: ...

    async def authenticate(self, prompt: str, fallback_label: str) -> bool: ...


@dataclass(frozen=True)
class BiometricCapability:
    available: bool
    types: List[str] = field(default_factory=list)


def enablement_key(user_id: str) -> str:
    return f"biometrics_enabled_{user_id}"


class BiometricGate:
    def __init__(
        self,
        authenticator: BiometricAuthenticator,
        store: SecureStore,
        session: SessionStorage,
        settings: ClientSettings | None = None,
    ):
        self.authenticator = authenticator
        self.store = store
        self.session = session
        self.settings = settings or ClientSettings()

    async def capability(self) -> BiometricCapability:
        """Available only with hardware present and at least one enrolled biometric."""
        try:
            if not await self.authenticator.has_hardware():
                return BiometricCapability(False)
            if not await self.authenticator.is_enrolled():
                return BiometricCapability(False)
            types = await self.authenticator.supported_types()
        except BiometricUnavailable as exc:
            logger.warning("biometric_capability_unavailable", error=str(exc))
            return BiometricCapability(False)
        return BiometricCapability(True, [_LABELS.get(t, "Biometric") for t in types])

    async def enable(self, user_id: str) -> bool:
        # consent can only be given from inside that user's session
        cached_user = await self.session.get_user()
        if not await self.session.get_access_token() or (cached_user or {}).get("id") != user_id:
            raise ClientError("biometric unlock needs an active session for this user")
        if not (await self.capability()).available:
            return False
        await self.store.set_item(enablement_key(user_id), "true")
        logger.info("biometrics_enabled", user_id=user_id)
        return True

    async def is_enabled(self, user_id: str) -> bool:
        return await self.store.get_item(enablement_key(user_id)) == "true"

    async def disable(self, user_id: str) -> None:
        await self.store.delete_item(enablement_key(user_id))

    async def can_offer(self) -> bool:
        """Cached session, opted-in user and usable hardware, all three."""
        if not await self.session.get_access_token():
            return False
        user = await self.session.get_user()
        if not user or not user.get("id"):
            return False
        if not await self.is_enabled(user["id"]):
            return False
        return (await self.capability()).available

    async def unlock(self) -> bool:
        if not await self.can_offer():
            return False
        try:
            return await self.authenticator.authenticate(
                self.settings.BIOMETRIC_PROMPT, self.settings.BIOMETRIC_FALLBACK_LABEL
            )
        except BiometricUnavailable as exc:
            logger.warning("biometric_unlock_unavailable", error=str(exc))
            return False
