"""Утилиты безопасности (пароли, JWT).

Пароли
------
Используется PBKDF2-HMAC-SHA256 (stdlib) с настраиваемым числом итераций.
Формат хранения:

`pbkdf2_sha256$<iterations>$<salt_b64>$<hash_b64>`

Число итераций хранится в самом хэше, поэтому его можно поднимать без
миграции: старые хэши продолжают проверяться.

JWT
---
Используется `PyJWT` (HS256 по умолчанию). Токен несёт `id`, `email`,
`iat`, `exp` и живёт `ACCESS_TOKEN_EXPIRE_DAYS` (7 дней).
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from ergotype.core.config import get_settings

_SCHEME = "pbkdf2_sha256"
_SALT_BYTES = 16
_DK_LEN = 32


class TokenError(Exception):
    """Токен не прошёл проверку."""


class TokenExpiredError(TokenError):
    pass


class TokenSignatureError(TokenError):
    pass


class TokenMalformedError(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    """Проверенные claims access token."""

    id: int
    email: str
    issued_at: datetime
    expires_at: datetime


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64decode(data: str) -> bytes:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def hash_password(password: str, iterations: int | None = None) -> str:
    """Захэшировать пароль.

    Parameters
    ----------
    password : str
        Пароль в открытом виде.
    iterations : int | None
        Число итераций PBKDF2; по умолчанию `PASSWORD_HASH_ITERATIONS`.

    Returns
    -------
    str
        Строка хэша в формате `<scheme>$<iterations>$<salt>$<hash>`.
    """

    if iterations is None:
        iterations = get_settings().password_hash_iterations
    salt = secrets.token_bytes(_SALT_BYTES)
    dk = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        iterations,
        dklen=_DK_LEN,
    )
    return f"{_SCHEME}${iterations}${_b64encode(salt)}${_b64encode(dk)}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Проверить пароль по сохранённому хэшу.

    Сравнение за постоянное время; битый хэш даёт False, а не исключение.

    Returns
    -------
    bool
        True, если пароль совпал.
    """

    try:
        scheme, iterations_s, salt_b64, digest_b64 = stored_hash.split("$", 3)
        if scheme != _SCHEME:
            return False
        iterations = int(iterations_s)
        salt = _b64decode(salt_b64)
        expected = _b64decode(digest_b64)
    except (AttributeError, TypeError, ValueError):
        return False
    if iterations <= 0 or not salt or not expected:
        return False

    dk = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        iterations,
        dklen=len(expected),
    )
    return hmac.compare_digest(dk, expected)


def create_access_token(
    user_id: int,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Создать JWT access token.

    Parameters
    ----------
    user_id : int
        Идентификатор пользователя.
    email : str
        Email пользователя.
    expires_delta : datetime.timedelta | None
        Срок жизни; по умолчанию `ACCESS_TOKEN_EXPIRE_DAYS`.

    Returns
    -------
    str
        JWT токен.
    """

    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.access_token_expire_days)
    now = datetime.now(timezone.utc)
    to_encode = {
        "id": user_id,
        "email": email,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )


def decode_access_token(token: str) -> TokenClaims:
    """Проверить JWT токен и вернуть claims.

    Raises
    ------
    TokenExpiredError
        Срок действия истёк.
    TokenSignatureError
        Подпись не совпала (чужой секрет или подделка).
    TokenMalformedError
        Токен не разбирается или в нём нет нужных claims.
    """

    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("token expired") from exc
    except jwt.InvalidSignatureError as exc:
        raise TokenSignatureError("invalid signature") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenMalformedError(str(exc)) from exc

    user_id = payload.get("id")
    email = payload.get("email")
    # bool тоже int, его не принимаем
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise TokenMalformedError("id claim must be an integer")
    if not isinstance(email, str) or not email:
        raise TokenMalformedError("email claim must be a string")

    return TokenClaims(
        id=user_id,
        email=email,
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
