from __future__ import annotations

from typing import Optional


class ClientError(Exception):
    """Base class for client-side auth failures."""


class ApiError(ClientError):
    """Non-2xx answer from the API."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message or "Something unexpected happened. Let's try that again."
        super().__init__(f"{status_code}: {self.message}")


class SessionExpired(ClientError):
    """Refresh failed; the stored session has been cleared."""


class InvalidTransition(ClientError):
    def __init__(self, phase: str, event: str):
        self.phase = phase
        self.event = event
        super().__init__(f"{event} is not allowed while {phase}")


class BiometricUnavailable(ClientError):
    """Device reported an error while talking to the biometric hardware."""
