"""Access and refresh JWTs, each signed with its own secret."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from app.core.config import Settings, ensure_signing_secrets
from app.core.errors import TokenExpired, TokenInvalid, VerificationFailed


@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    email: str
    expires_at: datetime


@dataclass(frozen=True)
class RefreshPayload:
    user_id: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class TokenCodec:
    def __init__(
        self,
        access_secret: str | None,
        refresh_secret: str | None,
        *,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        ensure_signing_secrets(access_secret, refresh_secret)
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(
            settings.ACCESS_TOKEN_SECRET,
            settings.REFRESH_TOKEN_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    # --- minting ---
    def issue(self, user_id: str, email: str, now: Optional[datetime] = None) -> TokenPair:
        issued_at = now or _utcnow()
        return TokenPair(
            access_token=self.issue_access(user_id, email, now=issued_at),
            refresh_token=self._sign(
                {"sub": user_id}, self._refresh_secret, issued_at, self.refresh_ttl
            ),
        )

    def issue_access(self, user_id: str, email: str, now: Optional[datetime] = None) -> str:
        issued_at = now or _utcnow()
        return self._sign(
            {"sub": user_id, "email": email}, self._access_secret, issued_at, self.access_ttl
        )

    def _sign(self, claims: dict, secret: str, issued_at: datetime, ttl: timedelta) -> str:
        to_encode = dict(claims)
        to_encode.update({"iat": issued_at, "exp": issued_at + ttl})
        return jwt.encode(to_encode, secret, algorithm=self.algorithm)

    # --- verification ---
    def verify_access(self, token: str, now: Optional[datetime] = None) -> TokenPayload:
        claims = self._decode(token, self._access_secret, now)
        email = claims.get("email")
        if not isinstance(email, str) or not email:
            raise VerificationFailed()
        return TokenPayload(
            user_id=claims["sub"],
            email=email,
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )

    def verify_refresh(self, token: str, now: Optional[datetime] = None) -> RefreshPayload:
        claims = self._decode(token, self._refresh_secret, now)
        return RefreshPayload(
            user_id=claims["sub"],
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )

    def _decode(self, token: str, secret: str, now: Optional[datetime]) -> dict[str, Any]:
        if not isinstance(token, str) or not token:
            raise VerificationFailed()
        try:
            # expiry is compared below against ``now`` so callers can pin the clock
            claims = jwt.decode(
                token, secret, algorithms=[self.algorithm], options={"verify_exp": False}
            )
        except JWTError as exc:
            raise TokenInvalid() from exc
        except (ValueError, TypeError, KeyError) as exc:
            raise VerificationFailed() from exc

        sub = claims.get("sub")
        exp = claims.get("exp")
        if not isinstance(sub, str) or not sub:
            raise VerificationFailed()
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise VerificationFailed()
        current = (now or _utcnow()).timestamp()
        if current > exp:
            raise TokenExpired()
        return claims

    def decode_unverified(self, token: str) -> Optional[dict[str, Any]]:
        """Read claims without checking the signature. Debugging only."""
        try:
            return jwt.get_unverified_claims(token)
        except JWTError:
            return None
