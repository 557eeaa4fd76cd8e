from app.core.errors import EmailTaken, InvalidPassword, NotFound, ValidationError, WeakPassword
from app.core.logging import get_logger
from app.core.messages import AUTH_MESSAGES
from app.core.security import PasswordHasher
from app.models.user import User
from app.services.users import UserStore, normalize_email

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8


class CredentialVerifier:
    """Email/password checks over the user store. Holds no state of its own."""

    def __init__(self, users: UserStore, hasher: PasswordHasher):
        self.users = users
        self.hasher = hasher

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.users.get_by_email(email)
        if user is None:
            self.hasher.dummy_verify()
            logger.info("credentials_rejected", reason="not_found")
            raise NotFound()

        if not self.hasher.verify(password, user.password_hash):
            logger.info("credentials_rejected", reason="invalid_password", user_id=user.id)
            raise InvalidPassword()

        return user

    async def create(self, email: str, password: str) -> User:
        email = normalize_email(email)
        if not email or "@" not in email:
            raise ValidationError(AUTH_MESSAGES["emailInvalid"])
        # length is the only rule enforced
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise WeakPassword()

        if await self.users.get_by_email(email) is not None:
            raise EmailTaken()

        user = await self.users.create(email, self.hasher.hash(password))
        logger.info("user_created", user_id=user.id)
        return user
