"""Общие зависимости для роутов FastAPI (auth, user context)."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ergotype.core import errors
from ergotype.core.config import get_settings
from ergotype.core.errors import AuthenticationError
from ergotype.core.security import TokenExpiredError, TokenError, decode_access_token
from ergotype.db.session import get_db
from ergotype.models.user import User
from ergotype.services.users import get_user_by_id


@dataclass(frozen=True)
class CurrentUser:
    """Аутентифицированная личность запроса."""

    id: int
    email: str
    user: User


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Получить текущего пользователя по токену из cookie.

    Parameters
    ----------
    request : fastapi.Request
        Текущий запрос (cookie с токеном).
    db : sqlalchemy.ext.asyncio.AsyncSession
        Async сессия БД.

    Returns
    -------
    CurrentUser
        Текущий пользователь; также сохраняется в `request.state.user`.

    Raises
    ------
    AuthenticationError
        401: нет токена, токен неверный/просрочен или пользователь удалён.
    """

    token = request.cookies.get(get_settings().auth_cookie_name)
    if not token:
        raise AuthenticationError(errors.ACCESS_TOKEN_REQUIRED)

    try:
        claims = decode_access_token(token)
    except TokenExpiredError as exc:
        logger.info("Token rejected reason=expired")
        raise AuthenticationError(errors.TOKEN_EXPIRED) from exc
    except TokenError as exc:
        logger.info("Token rejected reason={reason}", reason=type(exc).__name__)
        raise AuthenticationError(errors.INVALID_TOKEN) from exc

    user = await get_user_by_id(db, user_id=claims.id)
    if user is None:
        logger.info("Token rejected reason=user_missing user_id={id}", id=claims.id)
        raise AuthenticationError(errors.USER_NOT_FOUND)

    current = CurrentUser(id=claims.id, email=claims.email, user=user)
    request.state.user = current
    return current
