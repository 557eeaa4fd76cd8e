from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import EmailTaken
from app.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    """User records keyed by id and by (unique, lowercase) email."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        res = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        return res.scalar_one_or_none()

    async def get_by_id(self, user_id: str) -> User | None:
        res = await self.db.execute(select(User).where(User.id == user_id))
        return res.scalar_one_or_none()

    async def create(self, email: str, password_hash: str) -> User:
        user = User(email=normalize_email(email), password_hash=password_hash, totp_secret=None)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise EmailTaken() from exc
        await self.db.refresh(user)
        return user

    async def set_totp_secret(self, user_id: str, secret: str | None) -> None:
        await self.db.execute(update(User).where(User.id == user_id).values(totp_secret=secret))
        await self.db.commit()
