"""Бизнес-логика аутентификации: регистрация и вход.

Оба сценария не раскрывают, зарегистрирован ли email:
- повторная регистрация отвечает так же, как успешная (201, то же сообщение);
- неизвестный email и неверный пароль дают одну и ту же ошибку.
"""

from __future__ import annotations

import asyncio
import secrets
from functools import lru_cache
from http import HTTPStatus

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ergotype.core.errors import ConflictError
from ergotype.core.security import hash_password, verify_password
from ergotype.models.user import User
from ergotype.schemas.auth import SignupResponse, UserOut
from ergotype.services.users import create_user, get_user_by_email

SIGNUP_MESSAGE = (
    "If an account with this email doesn't exist, it has been created successfully"
)


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return hash_password(secrets.token_urlsafe(16))


async def signup_user(db: AsyncSession, email: str, password: str) -> User | None:
    """Зарегистрировать пользователя, если email ещё свободен.

    Parameters
    ----------
    db : sqlalchemy.ext.asyncio.AsyncSession
        Async сессия БД.
    email : str
        Проверенный email.
    password : str
        Пароль, прошедший политику.

    Returns
    -------
    User | None
        Созданный пользователь или None, если ничего не записано
        (email уже занят или параллельная регистрация успела раньше).
    """

    existing = await get_user_by_email(db, email=email)
    if existing is not None:
        logger.info("Signup for existing account absorbed user_id={id}", id=existing.id)
        return None

    password_hash = await asyncio.to_thread(hash_password, password)
    try:
        user = await create_user(db, email=email, password_hash=password_hash)
    except ConflictError:
        logger.warning("Signup lost uniqueness race, absorbed")
        return None

    logger.info("User created user_id={id}", id=user.id)
    return user


def shape_signup_response(created_user: User | None) -> tuple[int, SignupResponse]:
    """Сформировать ответ на регистрацию.

    Статус и сообщение всегда одинаковые; проекция пользователя
    добавляется, только если запись действительно создана.

    Returns
    -------
    tuple[int, SignupResponse]
        (HTTP статус, тело ответа).
    """

    if created_user is None:
        return HTTPStatus.CREATED, SignupResponse(message=SIGNUP_MESSAGE)
    return HTTPStatus.CREATED, SignupResponse(
        message=SIGNUP_MESSAGE,
        user=UserOut.model_validate(created_user),
    )


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    """Проверить логин/пароль.

    Parameters
    ----------
    db : sqlalchemy.ext.asyncio.AsyncSession
        Async сессия БД.
    email : str
        Email пользователя.
    password : str
        Пароль в открытом виде.

    Returns
    -------
    User | None
        Пользователь при успехе, иначе None.
    """

    user = await get_user_by_email(db, email=email)
    if user is None:
        # тот же объём работы, что и при неверном пароле
        await asyncio.to_thread(verify_password, password, _dummy_password_hash())
        return None
    if not await asyncio.to_thread(verify_password, password, user.password_hash):
        return None
    return user
