from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import structlog

from client.api import ApiClient
from client.auth_service import AuthApi
from client.biometrics import BiometricGate
from client.errors import ClientError, InvalidTransition
from client.state import (
    AuthEvent, AuthPhase, AuthState, SecondFactorCancelled, SecondFactorRequired,
    SessionRestored, SignedIn, SignedOut, TokenRefreshed, reduce,
)
from client.storage import SessionStorage

logger = structlog.get_logger(__name__)

Listener = Callable[[AuthState], None]


class AuthStore:
    def __init__(self, initial: Optional[AuthState] = None):
        self._state = initial or AuthState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, event: AuthEvent) -> AuthState:
        previous = self._state
        self._state = reduce(previous, event)
        logger.debug(
            "auth_transition",
            event_type=type(event).__name__,
            from_phase=previous.phase.value,
            to_phase=self._state.phase.value,
        )
        for listener in list(self._listeners):
            listener(self._state)
        return self._state


class AuthFlow:
    def __init__(
        self,
        api: ApiClient,
        storage: SessionStorage,
        store: Optional[AuthStore] = None,
        biometrics: Optional[BiometricGate] = None,
    ):
        self.api = api
        self.auth = AuthApi(api)
        self.storage = storage
        self.store = store or AuthStore()
        self.biometrics = biometrics
        api.on_session_expired = self._on_session_expired
        api.on_token_refreshed = self._on_token_refreshed

    @property
    def state(self) -> AuthState:
        return self.store.state

    # --- startup ---
    async def bootstrap(self) -> AuthState:
        """LOADING -> AUTHENTICATED iff a token and user are cached. No network call."""
        token = await self.storage.get_access_token()
        user = await self.storage.get_user()
        return self.store.dispatch(SessionRestored(token, user))

    async def unlock_with_biometrics(self) -> AuthState:
        """Biometric success restores the cached session; anything else shows the form."""
        if self.biometrics is not None and await self.biometrics.unlock():
            return await self.bootstrap()
        return self.store.dispatch(SessionRestored(None))

    async def restore_session(self) -> AuthState:
        token = await self.storage.get_access_token()
        user = await self.storage.get_user()
        if not token or not user:
            raise ClientError("no session to restore")
        return self.store.dispatch(SessionRestored(token, user))

    # --- credentials ---
    async def sign_up(self, email: str, password: str) -> AuthState:
        body = await self.auth.signup(email, password)
        return await self._sign_in(body)

    async def log_in(self, email: str, password: str) -> AuthState:
        body = await self.auth.login(email, password)
        if body.get("requires2FA"):
            return self.store.dispatch(SecondFactorRequired(body["userId"]))
        return await self._sign_in(body)

    async def verify_second_factor(self, code: str) -> AuthState:
        state = self.store.state
        if state.phase is not AuthPhase.SECOND_FACTOR_PENDING or not state.pending_user_id:
            raise InvalidTransition(state.phase.value, "verify_second_factor")
        # a rejected code raises ApiError and leaves the machine pending for a retry
        body = await self.auth.verify_2fa(state.pending_user_id, code)
        return await self._sign_in(body)

    def cancel_second_factor(self) -> AuthState:
        return self.store.dispatch(SecondFactorCancelled())

    async def sign_out(self) -> AuthState:
        # local only: there is no server-side session to invalidate
        await self.storage.clear()
        return self.store.dispatch(SignedOut())

    # --- second factor management (authenticated) ---
    async def enable_second_factor(self) -> Dict[str, Any]:
        return await self.auth.enable_2fa()

    async def disable_second_factor(self) -> Dict[str, Any]:
        return await self.auth.disable_2fa()

    async def enable_biometrics(self) -> bool:
        state = self.store.state
        if self.biometrics is None or not state.is_authenticated or not state.user_id:
            return False
        return await self.biometrics.enable(state.user_id)

    async def _sign_in(self, body: Dict[str, Any]) -> AuthState:
        event = SignedIn(body["accessToken"], body["user"])
        # refused transitions raise here, before the stored session is touched
        reduce(self.store.state, event)
        await self.storage.save_tokens(body["accessToken"], body["refreshToken"])
        await self.storage.save_user(body["user"])
        return self.store.dispatch(event)

    async def _on_session_expired(self) -> None:
        logger.info("session_expired", phase=self.store.state.phase.value)
        self.store.dispatch(SignedOut())

    async def _on_token_refreshed(self, access_token: str) -> None:
        if self.store.state.is_authenticated:
            self.store.dispatch(TokenRefreshed(access_token))
