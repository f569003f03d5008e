import os

from tests.utils.keys import GoogleSigner, generate_rsa_pem_pair

# Settings are built at import time, the environment must be ready before
# anything under src is imported.
_PRIVATE_KEY, _PUBLIC_KEY = generate_rsa_pem_pair()
os.environ.update(
    {
        "APP_ENV": "test",
        "LOG_JSON": "false",
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "REDIS_URL": "redis://localhost:6379/15",
        "RATE_LIMIT_ENABLED": "false",
        "JWT_PRIVATE_KEY": _PRIVATE_KEY,
        "JWT_PUBLIC_KEY": _PUBLIC_KEY,
        "APP_DOMAIN": "masterhub.test",
        "FRONTEND_URL": "http://localhost:3000",
        "GOOGLE_CLIENT_ID": "test-client.apps.googleusercontent.com",
        "GOOGLE_CLIENT_SECRET": "google-secret",
        "GOOGLE_REDIRECT_URI": "http://localhost:3000/auth/google/callback",
        "FACEBOOK_CLIENT_ID": "fb-client",
        "FACEBOOK_CLIENT_SECRET": "fb-secret",
        "FACEBOOK_REDIRECT_URI": "http://localhost:3000/auth/facebook/callback",
        "INSTAGRAM_CLIENT_ID": "ig-client",
        "INSTAGRAM_CLIENT_SECRET": "ig-secret",
        "INSTAGRAM_REDIRECT_URI": "http://localhost:3000/auth/instagram/callback",
        "TELEGRAM_BOT_TOKEN": "123456:TEST-TOKEN",
    }
)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from src.core.config.settings import settings  # noqa: E402
from src.domain import entities  # noqa: E402,F401
from src.domain.services.auth.credentials import TokenConfig  # noqa: E402
from src.infrastructure.repositories import RefreshTokenRepository, UserRepository  # noqa: E402
from src.infrastructure.services.oauth.config import (  # noqa: E402
    build_google_verifier_config,
    build_provider_configs,
    build_telegram_config,
)
from tests.utils.memory_redis import InMemoryRedis  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    # StaticPool so the in-memory database survives across connections.
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    factory = sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def redis_client():
    return InMemoryRedis()


@pytest.fixture
def user_repository(db_session):
    return UserRepository(db_session)


@pytest.fixture
def refresh_repository(db_session):
    return RefreshTokenRepository(db_session)


@pytest.fixture(scope="session")
def google_signer():
    return GoogleSigner()


@pytest.fixture
def token_config():
    return TokenConfig.from_settings(settings)


@pytest.fixture
def provider_configs():
    return build_provider_configs(settings)


@pytest.fixture
def google_verifier_config():
    return build_google_verifier_config(settings)


@pytest.fixture
def telegram_config():
    return build_telegram_config(settings)
