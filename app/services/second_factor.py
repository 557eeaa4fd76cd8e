from dataclasses import dataclass

from app.core.errors import InvalidCode, NotEnabled
from app.core.logging import get_logger
from app.core.security import TotpProvider, qr_png_data_url
from app.models.user import User
from app.services.users import UserStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class SecondFactorSetup:
    secret: str
    provisioning_uri: str
    qr_code: str


def normalize_code(code: str) -> str:
    return "".join(code.split())


class SecondFactorVerifier:
    """Per-user TOTP secrets.

    Enabling stores the secret right away; there is no "pending, unconfirmed"
    state on the server, so any confirm-before-trust step is the client's job.
    """

    def __init__(self, users: UserStore, totp: TotpProvider):
        self.users = users
        self.totp = totp

    async def enable(self, user: User) -> SecondFactorSetup:
        secret = self.totp.generate_secret()
        await self.users.set_totp_secret(user.id, secret)
        uri = self.totp.provisioning_uri(secret, user.email)
        logger.info("second_factor_enabled", user_id=user.id)
        return SecondFactorSetup(secret=secret, provisioning_uri=uri, qr_code=qr_png_data_url(uri))

    async def verify(self, user_id: str, code: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None or not user.totp_secret:
            raise NotEnabled()
        if not self.totp.verify(user.totp_secret, normalize_code(code)):
            logger.info("second_factor_rejected", user_id=user_id)
            raise InvalidCode()
        return user

    async def disable(self, user_id: str) -> None:
        await self.users.set_totp_secret(user_id, None)
        logger.info("second_factor_disabled", user_id=user_id)
