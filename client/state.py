"""Client auth state machine as a value object plus a pure reducer.

::

    LOADING --SessionRestored(token,user)--> AUTHENTICATED
    LOADING --SessionRestored(None)--------> CREDENTIALS_FORM
    CREDENTIALS_FORM --SignedIn------------> AUTHENTICATED
    CREDENTIALS_FORM --SecondFactorRequired-> SECOND_FACTOR_PENDING
    SECOND_FACTOR_PENDING --SignedIn-------> AUTHENTICATED
    SECOND_FACTOR_PENDING --SecondFactorCancelled--> CREDENTIALS_FORM
    AUTHENTICATED --TokenRefreshed---------> AUTHENTICATED (new access token)
    any --SignedOut------------------------> CREDENTIALS_FORM
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Union

from client.errors import InvalidTransition


class AuthPhase(str, enum.Enum):
    LOADING = "loading"
    CREDENTIALS_FORM = "credentials_form"
    SECOND_FACTOR_PENDING = "second_factor_pending"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AuthState:
    phase: AuthPhase = AuthPhase.LOADING
    access_token: Optional[str] = None
    user: Optional[Dict[str, Any]] = field(default=None, compare=False)
    pending_user_id: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.phase is AuthPhase.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.phase is AuthPhase.AUTHENTICATED

    @property
    def is_unauthenticated(self) -> bool:
        return self.phase in (AuthPhase.CREDENTIALS_FORM, AuthPhase.SECOND_FACTOR_PENDING)

    @property
    def user_id(self) -> Optional[str]:
        return (self.user or {}).get("id")


# --- events ---
@dataclass(frozen=True)
class SessionRestored:
    access_token: Optional[str]
    user: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class SignedIn:
    access_token: str
    user: Dict[str, Any]


@dataclass(frozen=True)
class SignedOut:
    pass


@dataclass(frozen=True)
class SecondFactorRequired:
    user_id: str


@dataclass(frozen=True)
class SecondFactorCancelled:
    pass


@dataclass(frozen=True)
class TokenRefreshed:
    access_token: str


AuthEvent = Union[
    SessionRestored, SignedIn, SignedOut, SecondFactorRequired, SecondFactorCancelled, TokenRefreshed
]

_ALLOWED = {
    SessionRestored: {AuthPhase.LOADING, AuthPhase.CREDENTIALS_FORM},
    SignedIn: {AuthPhase.CREDENTIALS_FORM, AuthPhase.SECOND_FACTOR_PENDING},
    SignedOut: set(AuthPhase),
    SecondFactorRequired: {AuthPhase.CREDENTIALS_FORM},
    SecondFactorCancelled: {AuthPhase.SECOND_FACTOR_PENDING},
    TokenRefreshed: {AuthPhase.AUTHENTICATED},
}

SIGNED_OUT = AuthState(phase=AuthPhase.CREDENTIALS_FORM)


def reduce(state: AuthState, event: AuthEvent) -> AuthState:
    allowed = _ALLOWED.get(type(event))
    if allowed is None or state.phase not in allowed:
        raise InvalidTransition(state.phase.value, type(event).__name__)

    if isinstance(event, SessionRestored):
        # no server round-trip: a cached (possibly expired) token is trusted until a call 401s
        if event.access_token and event.user:
            return AuthState(AuthPhase.AUTHENTICATED, event.access_token, event.user)
        return SIGNED_OUT

    if isinstance(event, SignedIn):
        return AuthState(AuthPhase.AUTHENTICATED, event.access_token, event.user)

    if isinstance(event, SecondFactorRequired):
        return replace(state, phase=AuthPhase.SECOND_FACTOR_PENDING, pending_user_id=event.user_id)

    if isinstance(event, TokenRefreshed):
        return replace(state, access_token=event.access_token)

    # SignedOut / SecondFactorCancelled
    return SIGNED_OUT
