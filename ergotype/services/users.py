"""Хранилище учётных данных (таблица `users`)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ergotype.core.errors import ConflictError
from ergotype.models.user import User

_UNIQUE_VIOLATION_SQLSTATE = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    """True, если `IntegrityError` вызвана нарушением уникального индекса."""

    orig = exc.orig
    # asyncpg (через адаптер SQLAlchemy) и psycopg
    for attr in ("sqlstate", "pgcode"):
        if getattr(orig, attr, None) == _UNIQUE_VIOLATION_SQLSTATE:
            return True
    # sqlite3 / aiosqlite
    if getattr(orig, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE":
        return True
    return "UNIQUE constraint failed" in str(orig)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Найти пользователя по email.

    Parameters
    ----------
    db : sqlalchemy.ext.asyncio.AsyncSession
        Async сессия БД.
    email : str
        Email пользователя (сравнение с учётом регистра).

    Returns
    -------
    User | None
        Пользователь или None.
    """

    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Найти пользователя по идентификатору."""

    return await db.get(User, user_id)


async def create_user(db: AsyncSession, email: str, password_hash: str) -> User:
    """Создать пользователя.

    Parameters
    ----------
    db : sqlalchemy.ext.asyncio.AsyncSession
        Async сессия БД.
    email : str
        Email пользователя.
    password_hash : str
        Готовый хэш пароля.

    Returns
    -------
    User
        Созданный пользователь.

    Raises
    ------
    ConflictError
        Если пользователь с таким email уже существует (уникальный индекс).
    sqlalchemy.exc.IntegrityError
        Прочие нарушения ограничений БД (пробрасываются как есть).
    """

    if not password_hash:
        raise ValueError("password_hash must not be empty")

    user = User(email=email, password_hash=password_hash)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        if not _is_unique_violation(exc):
            raise
        raise ConflictError("email already registered") from exc
    await db.refresh(user)
    return user
