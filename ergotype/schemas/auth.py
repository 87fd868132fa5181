"""Схемы для аутентификации."""

from __future__ import annotations

import re
from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

EMAIL_MESSAGE = "Please enter a valid email address"
PASSWORD_REQUIRED_MESSAGE = "Password is required"
PASSWORD_MIN_LENGTH = 8
PASSWORD_ENCODING_MESSAGE = "Password contains invalid characters"

_PASSWORD_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[0-9]"), "Password must contain at least 1 number"),
    (re.compile(r"[A-Z]"), "Password must contain at least 1 capital letter"),
    (re.compile(r"[^A-Za-z0-9]"), "Password must contain at least 1 symbol"),
)


def validate_email_syntax(email: str) -> str:
    """Проверить синтаксис email.

    Email возвращается как есть: регистр значим, нормализации нет.

    Raises
    ------
    pydantic_core.PydanticCustomError
        Если email синтаксически неверный.
    """

    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise PydanticCustomError("email_invalid", EMAIL_MESSAGE) from exc
    return email


def ensure_encodable_password(password: str) -> str:
    """Отклонить пароль, который нельзя закодировать в UTF-8 (одиночные суррогаты).

    Raises
    ------
    pydantic_core.PydanticCustomError
        Если в пароле есть символы, не кодируемые в UTF-8.
    """

    try:
        password.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise PydanticCustomError("password_encoding", PASSWORD_ENCODING_MESSAGE) from exc
    return password


def validate_password_policy(password: str) -> str | None:
    """Проверить пароль на соответствие политике.

    Parameters
    ----------
    password : str
        Пароль в открытом виде.

    Returns
    -------
    str | None
        Сообщение о первом нарушенном правиле или None, если пароль подходит.
    """

    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
    for pattern, message in _PASSWORD_RULES:
        if pattern.search(password) is None:
            return message
    return None


class SignupRequest(BaseModel):
    """Схема регистрации пользователя.

    Attributes
    ----------
    email : str
        Email пользователя.
    password : str
        Пароль (в открытом виде, будет захэширован).
    """

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return validate_email_syntax(value)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        ensure_encodable_password(value)
        message = validate_password_policy(value)
        if message is not None:
            raise PydanticCustomError("password_policy", message)
        return value


class LoginRequest(BaseModel):
    """Схема входа по email/паролю."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return validate_email_syntax(value)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("password_required", PASSWORD_REQUIRED_MESSAGE)
        return ensure_encodable_password(value)


class UserOut(BaseModel):
    """Публичная проекция пользователя (без хэша пароля)."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    email: str
    created_at: datetime
    updated_at: datetime


class SignupResponse(BaseModel):
    """Ответ на регистрацию.

    `user` есть только если аккаунт действительно создан.
    """

    message: str
    user: UserOut | None = None


class UserResponse(BaseModel):
    """Ответ с текущим пользователем (login, me)."""

    user: UserOut
