"""Утилиты для тестов (TestClient + async SQLite)."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from ergotype.core.config import get_settings
from ergotype.core.rate_limit import InMemoryRateLimitStore, get_rate_limit_store
from ergotype.db.base import Base
from ergotype.db.session import get_db
from ergotype.main import create_app
from ergotype.models import keyboard as _keyboard  # noqa: F401  # ensure model import for metadata
from ergotype.models.user import User

T = TypeVar("T")

STRONG_PASSWORD = "Password1!"


def make_client(
    tmp_path: Path,
    *,
    raise_server_exceptions: bool = True,
) -> tuple[TestClient, async_sessionmaker[AsyncSession]]:
    """Собрать TestClient с тестовой SQLite БД (async).

    Parameters
    ----------
    tmp_path : pathlib.Path
        Временная директория pytest.
    raise_server_exceptions : bool
        Пробрасывать ли необработанные ошибки приложения в тест.

    Returns
    -------
    tuple[fastapi.testclient.TestClient, sqlalchemy.ext.asyncio.async_sessionmaker]
        (клиент приложения, фабрика async сессий).
    """

    db_path = tmp_path / "test.db"
    # NullPool: TestClient гоняет каждый запрос в своём event loop.
    engine: AsyncEngine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        poolclass=NullPool,
    )
    testing_session_local: async_sessionmaker[AsyncSession] = async_sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )

    async def _init_schema() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_init_schema())

    app = create_app()

    async def override_get_db():  # noqa: ANN001
        async with testing_session_local() as db:
            yield db

    store = InMemoryRateLimitStore(get_settings().rate_limit_window_seconds)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limit_store] = lambda: store
    client = TestClient(app, raise_server_exceptions=raise_server_exceptions)
    return client, testing_session_local


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Выполнить корутину в отдельном event loop."""

    return asyncio.run(coro)


def count_users(session_local: async_sessionmaker[AsyncSession], email: str) -> int:
    """Сколько записей пользователей с данным email в БД."""

    async def _count() -> int:
        async with session_local() as db:
            result = await db.scalar(
                select(func.count()).select_from(User).where(User.email == email),
            )
            return int(result or 0)

    return run(_count())


def signup(client: TestClient, email: str, password: str = STRONG_PASSWORD):
    return client.post("/api/auth/signup", json={"email": email, "password": password})


def login(client: TestClient, email: str, password: str = STRONG_PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})
