"""Server side of the login handshake.

One login attempt moves through::

    CREDENTIALS_SUBMITTED -> REJECTED
                          -> DIRECT_ISSUE -> AUTHENTICATED
                          -> SECOND_FACTOR_REQUIRED
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from app.core.errors import AuthFailure, TokenInvalid
from app.core.logging import get_logger
from app.core.tokens import TokenCodec, TokenPair
from app.models.user import User
from app.services.credentials import CredentialVerifier
from app.services.second_factor import SecondFactorVerifier
from app.services.users import UserStore

logger = get_logger(__name__)


class LoginStep(str, enum.Enum):
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    REJECTED = "rejected"
    DIRECT_ISSUE = "direct_issue"
    SECOND_FACTOR_REQUIRED = "second_factor_required"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AuthenticatedSession:
    tokens: TokenPair
    user: User
    step: LoginStep = LoginStep.AUTHENTICATED


@dataclass(frozen=True)
class SecondFactorChallenge:
    user_id: str
    step: LoginStep = LoginStep.SECOND_FACTOR_REQUIRED


LoginOutcome = Union[AuthenticatedSession, SecondFactorChallenge]


class SessionOrchestrator:
    def __init__(
        self,
        users: UserStore,
        credentials: CredentialVerifier,
        second_factor: SecondFactorVerifier,
        codec: TokenCodec,
    ):
        self.users = users
        self.credentials = credentials
        self.second_factor = second_factor
        self.codec = codec

    def _issue(self, user: User) -> AuthenticatedSession:
        return AuthenticatedSession(tokens=self.codec.issue(user.id, user.email), user=user)

    async def signup(self, email: str, password: str) -> AuthenticatedSession:
        user = await self.credentials.create(email, password)
        return self._issue(user)

    async def login(self, email: str, password: str) -> LoginOutcome:
        try:
            user = await self.credentials.authenticate(email, password)
        except AuthFailure:
            logger.info("login_step", step=LoginStep.REJECTED.value)
            raise

        if user.totp_secret:
            logger.info("login_step", step=LoginStep.SECOND_FACTOR_REQUIRED.value, user_id=user.id)
            return SecondFactorChallenge(user_id=user.id)

        logger.info("login_step", step=LoginStep.DIRECT_ISSUE.value, user_id=user.id)
        return self._issue(user)

    async def complete_second_factor(self, user_id: str, code: str) -> AuthenticatedSession:
        user = await self.second_factor.verify(user_id, code)
        logger.info("login_step", step=LoginStep.AUTHENTICATED.value, user_id=user.id)
        return self._issue(user)

    async def refresh(self, refresh_token: str) -> str:
        # the refresh token itself is not rotated
        payload = self.codec.verify_refresh(refresh_token)
        user = await self.users.get_by_id(payload.user_id)
        if user is None:
            raise TokenInvalid()
        return self.codec.issue_access(user.id, user.email)
