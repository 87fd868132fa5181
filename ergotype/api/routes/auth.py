"""Эндпоинты аутентификации (signup, login, me).

Сессия хранится в http-only cookie с JWT; серверного состояния нет.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ergotype.api.deps import CurrentUser, get_current_user
from ergotype.core import errors
from ergotype.core.config import get_settings
from ergotype.core.errors import AuthenticationError
from ergotype.core.rate_limit import RateLimiter, get_client_key
from ergotype.core.security import create_access_token
from ergotype.db.session import get_db
from ergotype.schemas.auth import (
    LoginRequest,
    SignupRequest,
    SignupResponse,
    UserOut,
    UserResponse,
)
from ergotype.services.auth import authenticate_user, shape_signup_response, signup_user

router = APIRouter()


def set_auth_cookie(response: Response, token: str) -> None:
    """Положить токен в cookie сессии.

    Cookie `HttpOnly`, `SameSite=Lax`, живёт столько же, сколько токен;
    в продакшене дополнительно `Secure`.
    """

    settings = get_settings()
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.access_token_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


@router.post(
    "/signup",
    response_model=SignupResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def signup(
    payload: SignupRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> SignupResponse:
    """Зарегистрировать пользователя.

    Parameters
    ----------
    payload : SignupRequest
        Данные регистрации (email, password).

    Returns
    -------
    SignupResponse
        Всегда 201 с одним и тем же сообщением; `user` только если аккаунт
        создан. Так нельзя узнать, зарегистрирован ли email.

    Raises
    ------
    ValidationError
        400, если email/пароль не прошли проверку (до обращения к БД).
    """

    created = await signup_user(db, email=payload.email, password=payload.password)
    status_code, body = shape_signup_response(created)
    response.status_code = status_code
    return body


@router.post("/login", response_model=UserResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Войти по email/паролю и получить cookie сессии.

    Returns
    -------
    UserResponse
        Публичная проекция пользователя.

    Raises
    ------
    AuthenticationError
        401 `Invalid credentials`: неизвестный email и неверный пароль
        неразличимы.
    """

    user = await authenticate_user(db, email=payload.email, password=payload.password)
    if user is None:
        logger.info("Login failed client={client}", client=get_client_key(request))
        raise AuthenticationError(errors.INVALID_CREDENTIALS)

    token = create_access_token(user_id=user.id, email=user.email)
    set_auth_cookie(response, token)
    logger.info("Login succeeded user_id={id}", id=user.id)
    return UserResponse(user=UserOut.model_validate(user))


@router.get(
    "/me",
    response_model=UserResponse,
    dependencies=[Depends(RateLimiter("auth_me"))],
)
async def me(current_user: CurrentUser = Depends(get_current_user)) -> UserResponse:
    """Получить текущего пользователя.

    Rate limit проверяется раньше токена.

    Raises
    ------
    RateLimitError
        429 при превышении лимита запросов с адреса клиента.
    AuthenticationError
        401 без токена, с неверным/просроченным токеном или для удалённого
        пользователя.
    """

    return UserResponse(user=UserOut.model_validate(current_user.user))
