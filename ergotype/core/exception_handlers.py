"""Обработчики исключений: все ошибки отдаются как JSON `{"error": ...}`.

Stack trace добавляется в тело ответа 500 только вне продакшена.
"""

from __future__ import annotations

import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from ergotype.core.config import get_settings
from ergotype.core.errors import AppError, ValidationError

_CUSTOM_MESSAGE_TYPES = {
    "email_invalid",
    "password_policy",
    "password_required",
    "password_encoding",
    "null_not_allowed",
}


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part != "body"]
    return ".".join(parts) if parts else "body"


def collect_field_errors(errors: list[dict]) -> dict[str, str]:
    """Свести ошибки pydantic к `{поле: сообщение}` (первая ошибка поля).

    Parameters
    ----------
    errors : list[dict]
        `RequestValidationError.errors()`.

    Returns
    -------
    dict[str, str]
        Сообщение на каждое поле.
    """

    fields: dict[str, str] = {}
    for err in errors:
        err_type = err.get("type", "")
        if err_type == "json_invalid":
            field = "body"
        else:
            field = _field_name(tuple(err.get("loc", ())))
        if field in fields:
            continue
        if err_type in _CUSTOM_MESSAGE_TYPES:
            message = err["msg"]
        elif err_type == "missing":
            message = f"{field.split('.')[-1].capitalize()} is required"
        elif err_type == "json_invalid":
            message = "Request body must be valid JSON"
        else:
            message = err.get("msg", "Invalid value")
        fields[field] = message
    return fields


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=int(exc.status),
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    error = ValidationError(collect_field_errors(list(exc.errors())))
    logger.debug(
        "Validation failed path={path} fields={fields}",
        path=request.url.path,
        fields=sorted(error.fields or {}),
    )
    return await app_error_handler(request, error)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        "Unhandled error {method} {path}",
        method=request.method,
        path=request.url.path,
    )
    content: dict[str, object] = {"error": "Internal Server Error"}
    if not get_settings().is_production:
        content["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Подключить обработчики ошибок к приложению."""

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
