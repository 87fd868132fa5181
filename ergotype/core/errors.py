"""Иерархия ошибок приложения.

Все ошибки, которые доходят до клиента, наследуются от `AppError` и
превращаются в JSON `{"error": <message>[, "fields": {...}]}` обработчиком
из `ergotype.core.exception_handlers`.
"""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus

INVALID_CREDENTIALS = "Invalid credentials"
ACCESS_TOKEN_REQUIRED = "Access token required"
INVALID_TOKEN = "Invalid token"
TOKEN_EXPIRED = "Token expired"
USER_NOT_FOUND = "User not found"
TOO_MANY_REQUESTS = "Too many requests from this IP, please try again later."


class AppError(Exception):
    """Базовая ошибка с HTTP статусом.

    Parameters
    ----------
    message : str
        Текст ошибки для клиента.
    status : http.HTTPStatus
        HTTP статус ответа.
    fields : Mapping[str, str] | None
        Ошибки по полям (для ошибок валидации).
    headers : Mapping[str, str] | None
        Дополнительные заголовки ответа.
    """

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        status: HTTPStatus | None = None,
        fields: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.fields = dict(fields) if fields else None
        self.headers = dict(headers) if headers else None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"error": self.message}
        if self.fields:
            payload["fields"] = self.fields
        return payload


class ValidationError(AppError):
    """Данные клиента не прошли проверку формата (400)."""

    status = HTTPStatus.BAD_REQUEST

    def __init__(self, fields: Mapping[str, str]) -> None:
        super().__init__("Validation error", fields=fields)


class AuthenticationError(AppError):
    """Нет/неверные/просроченные учётные данные (401)."""

    status = HTTPStatus.UNAUTHORIZED


class RateLimitError(AppError):
    """Превышен лимит запросов (429)."""

    status = HTTPStatus.TOO_MANY_REQUESTS

    def __init__(self, headers: Mapping[str, str] | None = None) -> None:
        super().__init__(TOO_MANY_REQUESTS, headers=headers)


class NotFoundError(AppError):
    status = HTTPStatus.NOT_FOUND


class ConflictError(AppError):
    """Нарушение уникальности в хранилище.

    Регистрация поглощает эту ошибку и отвечает так же, как при создании
    аккаунта, поэтому клиент её не видит.
    """

    status = HTTPStatus.CONFLICT


class FatalConfigError(RuntimeError):
    """Конфигурация невалидна: процесс не должен стартовать."""
