"""Service errors; mapped to responses in app.api.error_handling."""
from __future__ import annotations

from typing import Optional

from app.core.messages import AUTH_MESSAGES, VALIDATION_MESSAGES


class ConfigurationError(Exception):
    """Invalid process configuration (missing or shared signing secrets)."""


class ServiceError(Exception):
    status_code: int = 400
    error_code: str = "validation_error"
    default_message: str = VALIDATION_MESSAGES["fieldRequired"]

    def __init__(self, message: Optional[str] = None, *, detail: Optional[dict] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.detail = detail or {}


class ValidationError(ServiceError):
    """Malformed or missing input (400)."""
    status_code = 400
    error_code = "validation_error"


class WeakPassword(ValidationError):
    default_message = AUTH_MESSAGES["passwordWeak"]


class ConflictError(ServiceError):
    status_code = 400
    error_code = "conflict"


class EmailTaken(ConflictError):
    default_message = AUTH_MESSAGES["emailExists"]


class AuthFailure(ServiceError):
    """Bad credentials, code or token (401)."""
    status_code = 401
    error_code = "unauthorized"
    default_message = AUTH_MESSAGES["tokenInvalid"]


# --- credentials ---
class CredentialError(AuthFailure):
    # unknown email and wrong password share one message (no account enumeration)
    default_message = AUTH_MESSAGES["invalidCredentials"]


class NotFound(CredentialError):
    pass


class InvalidPassword(CredentialError):
    pass


# --- tokens ---
class TokenError(AuthFailure):
    # one message for every cause; the subclass only shows up in logs
    default_message = AUTH_MESSAGES["tokenInvalid"]


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


class VerificationFailed(TokenError):
    pass


# --- second factor ---
class SecondFactorError(AuthFailure):
    default_message = AUTH_MESSAGES["twoFactorInvalid"]


class NotEnabled(SecondFactorError):
    pass


class InvalidCode(SecondFactorError):
    pass


__all__ = [
    "ConfigurationError",
    "ServiceError",
    "ValidationError",
    "WeakPassword",
    "ConflictError",
    "EmailTaken",
    "AuthFailure",
    "CredentialError",
    "NotFound",
    "InvalidPassword",
    "TokenError",
    "TokenExpired",
    "TokenInvalid",
    "VerificationFailed",
    "SecondFactorError",
    "NotEnabled",
    "InvalidCode",
]
