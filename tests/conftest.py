"""Конфигурация pytest."""

import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

# В тестах не запускаем миграции на старте приложения и хэшируем пароли быстро.
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-min-32-chars-123456")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test-ergotype.db")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from ergotype.core import config as config_module  # noqa: E402
from ergotype.core import rate_limit as rate_limit_module  # noqa: E402

config_module.get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_cached_settings():
    """Сбросить кэши настроек/лимитеров после теста (monkeypatch env)."""

    yield
    config_module.get_settings.cache_clear()
    rate_limit_module.get_memory_rate_limit_store.cache_clear()
    rate_limit_module.get_redis_rate_limit_store.cache_clear()
