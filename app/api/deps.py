from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core.errors import TokenInvalid
from app.core.security import BcryptPasswordHasher, PasswordHasher, PyotpTotpProvider, TotpProvider
from app.core.tokens import TokenCodec, TokenPayload
from app.models.user import User
from app.services.credentials import CredentialVerifier
from app.services.second_factor import SecondFactorVerifier
from app.services.sessions import SessionOrchestrator
from app.services.users import UserStore

# auto_error=False: a missing header must answer 401 like every other auth failure
bearer = HTTPBearer(auto_error=False)


@lru_cache
def get_token_codec() -> TokenCodec:
    return TokenCodec.from_settings(settings)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return BcryptPasswordHasher()


@lru_cache
def get_totp_provider() -> TotpProvider:
    return PyotpTotpProvider(issuer=settings.TOTP_ISSUER, valid_window=settings.TOTP_VALID_WINDOW)


def get_user_store(db: AsyncSession = Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_second_factor(
    users: UserStore = Depends(get_user_store),
    totp: TotpProvider = Depends(get_totp_provider),
) -> SecondFactorVerifier:
    return SecondFactorVerifier(users, totp)


def get_orchestrator(
    users: UserStore = Depends(get_user_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
    second_factor: SecondFactorVerifier = Depends(get_second_factor),
    codec: TokenCodec = Depends(get_token_codec),
) -> SessionOrchestrator:
    return SessionOrchestrator(users, CredentialVerifier(users, hasher), second_factor, codec)


async def get_current_claims(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    codec: TokenCodec = Depends(get_token_codec),
) -> TokenPayload:
    """Verified access-token claims from ``Authorization: Bearer <token>``."""
    if creds is None or creds.scheme.lower() != "bearer" or not creds.credentials:
        raise TokenInvalid()
    return codec.verify_access(creds.credentials)


async def get_current_user(
    claims: TokenPayload = Depends(get_current_claims),
    users: UserStore = Depends(get_user_store),
) -> User:
    user = await users.get_by_id(claims.user_id)
    if not user:
        raise TokenInvalid()
    return user
