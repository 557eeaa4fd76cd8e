"""Credential verifier and user store over a throwaway SQLite database."""
import pytest

from app.core.errors import (
    CredentialError, EmailTaken, InvalidPassword, NotFound, ValidationError, WeakPassword,
)
from app.services.credentials import CredentialVerifier
from app.services.users import normalize_email

PASSWORD = "correct-horse-battery"


class CountingHasher:
    """Wraps a real hasher and records dummy verifications."""

    def __init__(self, inner):
        self.inner = inner
        self.dummy_calls = 0

    def hash(self, plain):
        return self.inner.hash(plain)

    def verify(self, plain, hashed):
        return self.inner.verify(plain, hashed)

    def dummy_verify(self):
        self.dummy_calls += 1
        self.inner.dummy_verify()


def test_normalize_email():
    assert normalize_email("  Alice@Example.COM ") == "alice@example.com"


async def test_create_hashes_the_password(credentials, users):
    user = await credentials.create("alice@example.com", PASSWORD)

    stored = await users.get_by_id(user.id)
    assert stored.email == "alice@example.com"
    assert stored.password_hash != PASSWORD
    assert stored.password_hash.startswith("$2")
    assert stored.totp_secret is None
    assert stored.has_2fa_enabled is False


async def test_create_normalizes_email(credentials, users):
    await credentials.create("  Bob@Example.com", PASSWORD)

    assert await users.get_by_email("bob@example.com") is not None
    assert await users.get_by_email("BOB@EXAMPLE.COM") is not None


async def test_create_rejects_duplicate_email(credentials):
    await credentials.create("carol@example.com", PASSWORD)

    with pytest.raises(EmailTaken):
        await credentials.create("Carol@example.com", PASSWORD)


async def test_store_maps_integrity_error_to_email_taken(users, hasher):
    await users.create("dave@example.com", hasher.hash(PASSWORD))

    with pytest.raises(EmailTaken):
        await users.create("dave@example.com", hasher.hash(PASSWORD))


@pytest.mark.parametrize("password", ["", "short", "1234567"])
async def test_create_rejects_weak_password(credentials, password):
    with pytest.raises(WeakPassword):
        await credentials.create("erin@example.com", password)


async def test_eight_characters_is_enough(credentials):
    user = await credentials.create("frank@example.com", "12345678")

    assert user.id


async def test_create_rejects_email_without_at(credentials):
    with pytest.raises(ValidationError):
        await credentials.create("not-an-email", PASSWORD)


async def test_authenticate_returns_the_user(credentials):
    created = await credentials.create("grace@example.com", PASSWORD)

    user = await credentials.authenticate("GRACE@example.com", PASSWORD)

    assert user.id == created.id


async def test_wrong_password(credentials):
    await credentials.create("heidi@example.com", PASSWORD)

    with pytest.raises(InvalidPassword):
        await credentials.authenticate("heidi@example.com", "wrong-password")


async def test_unknown_email_still_burns_a_hash(users, hasher):
    counting = CountingHasher(hasher)
    verifier = CredentialVerifier(users, counting)

    with pytest.raises(NotFound):
        await verifier.authenticate("nobody@example.com", PASSWORD)
    assert counting.dummy_calls == 1


async def test_failures_share_one_message(credentials):
    await credentials.create("ivan@example.com", PASSWORD)

    with pytest.raises(CredentialError) as missing:
        await credentials.authenticate("nobody@example.com", PASSWORD)
    with pytest.raises(CredentialError) as wrong:
        await credentials.authenticate("ivan@example.com", "wrong-password")

    assert type(missing.value) is not type(wrong.value)
    assert missing.value.message == wrong.value.message
    assert missing.value.status_code == wrong.value.status_code == 401
