import base64
from io import BytesIO
from typing import Protocol

import pyotp
import qrcode
from passlib.context import CryptContext


class PasswordHasher(Protocol):
    def hash(self, plain: str) -> str: ...

    def verify(self, plain: str, hashed: str) -> bool: ...

    def dummy_verify(self) -> None: ...


class TotpProvider(Protocol):
    def generate_secret(self) -> str: ...

    def provisioning_uri(self, secret: str, account: str) -> str: ...

    def verify(self, secret: str, code: str) -> bool: ...


class BcryptPasswordHasher:
    """bcrypt through passlib; ``verify`` compares in constant time."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plain: str) -> str:
        return self._context.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        return self._context.verify(plain, hashed)

    def dummy_verify(self) -> None:
        # burns the same time as a real verify when the account does not exist
        self._context.dummy_verify()


class PyotpTotpProvider:
    """RFC 6238 TOTP: 30 second step, 6 digits."""

    def __init__(self, issuer: str, valid_window: int = 1):
        self.issuer = issuer
        self.valid_window = valid_window

    def generate_secret(self) -> str:
        return pyotp.random_base32()

    def provisioning_uri(self, secret: str, account: str) -> str:
        return pyotp.TOTP(secret).provisioning_uri(name=account, issuer_name=self.issuer)

    def verify(self, secret: str, code: str) -> bool:
        if not code.isdigit():
            return False
        return pyotp.TOTP(secret).verify(code, valid_window=self.valid_window)


def qr_png_data_url(text: str) -> str:
    img = qrcode.make(text)
    buf = BytesIO()
    img.save(buf, "PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
