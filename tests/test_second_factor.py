from datetime import datetime, timedelta

import pyotp
import pytest

from app.core.errors import InvalidCode, NotEnabled
from app.core.security import PyotpTotpProvider, qr_png_data_url
from app.services.second_factor import normalize_code

PASSWORD = "correct-horse-battery"


@pytest.fixture
async def user(credentials):
    return await credentials.create("totp@example.com", PASSWORD)


async def test_enable_stores_secret_and_returns_setup(second_factor, users, user):
    setup = await second_factor.enable(user)

    stored = await users.get_by_id(user.id)
    assert stored.totp_secret == setup.secret
    assert stored.has_2fa_enabled is True
    assert setup.provisioning_uri.startswith("otpauth://totp/")
    assert "issuer=Dynastia" in setup.provisioning_uri
    assert setup.qr_code.startswith("data:image/png;base64,")


async def test_verify_accepts_current_code(second_factor, user):
    setup = await second_factor.enable(user)

    verified = await second_factor.verify(user.id, pyotp.TOTP(setup.secret).now())

    assert verified.id == user.id


async def test_verify_tolerates_whitespace(second_factor, user):
    setup = await second_factor.enable(user)
    code = pyotp.TOTP(setup.secret).now()

    verified = await second_factor.verify(user.id, f" {code[:3]} {code[3:]} ")

    assert verified.id == user.id


async def test_verify_rejects_wrong_code(second_factor, user):
    setup = await second_factor.enable(user)
    code = pyotp.TOTP(setup.secret).now()
    wrong = str((int(code) + 500000) % 1000000).zfill(6)

    with pytest.raises(InvalidCode):
        await second_factor.verify(user.id, wrong)


async def test_verify_rejects_non_numeric_code(second_factor, user):
    await second_factor.enable(user)

    with pytest.raises(InvalidCode):
        await second_factor.verify(user.id, "abcdef")


async def test_verify_without_secret(second_factor, user):
    with pytest.raises(NotEnabled):
        await second_factor.verify(user.id, "123456")


async def test_verify_unknown_user(second_factor):
    with pytest.raises(NotEnabled):
        await second_factor.verify("no-such-user", "123456")


async def test_disable_is_idempotent(second_factor, users, user):
    await second_factor.enable(user)

    await second_factor.disable(user.id)
    await second_factor.disable(user.id)

    stored = await users.get_by_id(user.id)
    assert stored.totp_secret is None


async def test_reenable_rotates_the_secret(second_factor, users, user):
    first = await second_factor.enable(user)
    second = await second_factor.enable(user)

    assert first.secret != second.secret
    assert (await users.get_by_id(user.id)).totp_secret == second.secret


def test_normalize_code():
    assert normalize_code(" 12 34\t56\n") == "123456"


class TestTotpProvider:
    def test_adjacent_step_is_accepted(self):
        provider = PyotpTotpProvider("Dynastia", valid_window=1)
        secret = provider.generate_secret()
        previous = pyotp.TOTP(secret).at(datetime.now() - timedelta(seconds=30))

        assert provider.verify(secret, previous)

    def test_stale_code_is_rejected(self):
        provider = PyotpTotpProvider("Dynastia", valid_window=0)
        secret = provider.generate_secret()
        stale = pyotp.TOTP(secret).at(datetime.now() - timedelta(minutes=10))

        assert provider.verify(secret, stale) is False or stale == pyotp.TOTP(secret).now()

    def test_empty_code(self):
        provider = PyotpTotpProvider("Dynastia")

        assert provider.verify(provider.generate_secret(), "") is False


def test_qr_png_data_url():
    assert qr_png_data_url("otpauth://totp/x?secret=ABC").startswith("data:image/png;base64,iVBOR")
