"""Запуск Alembic миграций при старте приложения (lifespan).

Важно
-----
Обычно миграции гоняются отдельным шагом деплоя. Для "самодостаточного"
запуска их можно применить на старте (`RUN_MIGRATIONS_ON_STARTUP=true`).
Для Postgres берётся advisory lock, чтобы миграции выполнял ровно один
процесс.
"""

from __future__ import annotations

import time
import zlib
from contextlib import contextmanager
from pathlib import Path

import psycopg2
from alembic import command
from alembic.config import Config
from loguru import logger

from ergotype.core.config import Settings, get_settings

_PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _is_postgres(url: str) -> bool:
    return url.startswith("postgresql://")


def make_alembic_config(database_url: str) -> Config:
    """Собрать конфиг Alembic с URL приложения."""

    cfg = Config(str(_PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(_PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    # логирование уже настроено через loguru
    cfg.attributes["skip_logging"] = True
    return cfg


def _wait_for_postgres(settings: Settings) -> None:
    """Подождать доступности Postgres перед миграциями."""

    tries = settings.migrations_wait_tries
    sleep_seconds = settings.migrations_wait_sleep_seconds

    for i in range(1, tries + 1):
        try:
            conn = psycopg2.connect(settings.sqlalchemy_url)
        except psycopg2.OperationalError:
            logger.info(
                "DB not ready yet ({i}/{n}), sleep {s}s",
                i=i,
                n=tries,
                s=sleep_seconds,
            )
            time.sleep(sleep_seconds)
            continue
        conn.close()
        return

    raise RuntimeError("database is not reachable for migrations")


@contextmanager
def _pg_advisory_lock(database_url: str, lock_key: int):
    """Взять advisory lock на Postgres и гарантированно отпустить."""

    conn = psycopg2.connect(database_url)
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            cur.execute("SELECT pg_advisory_lock(%s)", (lock_key,))
        yield
    finally:
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT pg_advisory_unlock(%s)", (lock_key,))
        finally:
            conn.close()


def run_migrations_once() -> None:
    """Применить миграции до head, если это включено настройками."""

    settings = get_settings()
    logger.info(
        "Migrations on startup enabled={v}",
        v=settings.run_migrations_on_startup,
    )
    if not settings.run_migrations_on_startup:
        return

    db_url = settings.sqlalchemy_url
    cfg = make_alembic_config(db_url)
    if _is_postgres(db_url):
        _wait_for_postgres(settings)
        lock_key = zlib.crc32(settings.app_name.encode("utf-8"))
        logger.info("Acquiring advisory lock key={k}", k=lock_key)
        with _pg_advisory_lock(db_url, lock_key):
            command.upgrade(cfg, "head")
    else:
        command.upgrade(cfg, "head")
    logger.info("Migrations completed")
