import os
import tempfile

# Settings are read at import time: configure the process before importing the app
_test_tmp_dir = tempfile.mkdtemp(prefix="dynastia_test_")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret-do-not-use-in-production")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_test_tmp_dir}/dynastia.db")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx  # noqa: E402
import pytest  # noqa: E402

from app.api.deps import get_password_hasher, get_token_codec  # noqa: E402
from app.core.db import build_engine, build_sessionmaker, create_all, get_db  # noqa: E402
from app.core.security import BcryptPasswordHasher, PyotpTotpProvider  # noqa: E402
from app.core.tokens import TokenCodec  # noqa: E402
from app.main import app  # noqa: E402
from app.services.credentials import CredentialVerifier  # noqa: E402
from app.services.second_factor import SecondFactorVerifier  # noqa: E402
from app.services.sessions import SessionOrchestrator  # noqa: E402
from app.services.users import UserStore  # noqa: E402


@pytest.fixture
async def engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}")
    await create_all(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db(engine):
    async with build_sessionmaker(engine)() as session:
        yield session


@pytest.fixture
def hasher():
    # minimum bcrypt cost keeps the suite fast
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def totp():
    return PyotpTotpProvider(issuer="Dynastia", valid_window=1)


@pytest.fixture
def codec():
    return TokenCodec("unit-access-secret", "unit-refresh-secret")


@pytest.fixture
def users(db):
    return UserStore(db)


@pytest.fixture
def credentials(users, hasher):
    return CredentialVerifier(users, hasher)


@pytest.fixture
def second_factor(users, totp):
    return SecondFactorVerifier(users, totp)


@pytest.fixture
def orchestrator(users, credentials, second_factor, codec):
    return SessionOrchestrator(users, credentials, second_factor, codec)


@pytest.fixture
def app_codec():
    """The codec the running app signs with."""
    return get_token_codec()


@pytest.fixture
def asgi_app(engine, hasher):
    sessions = build_sessionmaker(engine)

    async def _get_db():
        async with sessions() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(asgi_app):
    transport = httpx.ASGITransport(app=asgi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
