"""Точка входа FastAPI приложения."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ergotype.api.router import api_router
from ergotype.core.config import get_settings
from ergotype.core.exception_handlers import register_exception_handlers
from ergotype.core.logging import setup_logging
from ergotype.core.migrations import run_migrations_once


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    """Lifespan приложения.

    Миграции запускаются один раз при старте процесса (если включено).
    """

    await asyncio.to_thread(run_migrations_once)
    yield


def create_app() -> FastAPI:
    """Создать и сконфигурировать экземпляр FastAPI.

    Returns
    -------
    fastapi.FastAPI
        Сконфигурированное приложение.

    Raises
    ------
    FatalConfigError
        Если конфигурация невалидна (например, не задан `SECRET_KEY`).
    """

    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Starting {name} env={env}", name=settings.app_name, env=settings.app_env)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_methods_list,
        allow_headers=settings.cors_headers_list,
    )
    register_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()
