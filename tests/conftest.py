"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from golong.auth.jwt import reset_keys
from golong.config import get_settings
from golong.database import close_db, get_engine, get_session_factory, init_db
from golong.db import models  # noqa: F401
from golong.db.base import Base


@pytest.fixture(scope="session", autouse=True)
def _test_keys(tmp_path_factory: pytest.TempPathFactory) -> tuple[Path, Path]:
    """Generate an RSA key pair for JWT signing and point the settings at it."""
    keydir = tmp_path_factory.mktemp("golong_keys")
    private_path = keydir / "jwt_private.pem"
    public_path = keydir / "jwt_public.pem"

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_path.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    public_path.write_bytes(
        key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )

    os.environ["GOLONG_JWT_PRIVATE_KEY_PATH"] = str(private_path)
    os.environ["GOLONG_JWT_PUBLIC_KEY_PATH"] = str(public_path)
    os.environ["GOLONG_LOG_FORMAT"] = "console"
    get_settings.cache_clear()
    reset_keys()
    return private_path, public_path


@pytest_asyncio.fixture
async def db_session(tmp_path: Path) -> AsyncGenerator[AsyncSession, None]:
    """A session on a fresh SQLite database with the full schema."""
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'golong.db'}")
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with get_session_factory()() as session:
        yield session

    await close_db()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, sharing the database behind ``db_session``."""
    from golong.main import create_app

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
