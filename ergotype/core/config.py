"""Конфигурация приложения.

Все настройки приходят из переменных окружения (опционально через `.env`).
Секрет подписи токенов (`SECRET_KEY`) обязателен: без него процесс не
стартует. Секреты нельзя хранить в репозитории/коде.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ergotype.core.errors import FatalConfigError

_PRODUCTION_ENVS = {"production", "prod"}


def _split_csv(value: str) -> list[str]:
    """Разбить строку CSV на список значений.

    Parameters
    ----------
    value : str
        CSV строка.

    Returns
    -------
    list[str]
        Список значений без пробелов.
    """

    if value.strip() == "*":
        return ["*"]
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseSettings):
    """Настройки приложения из переменных окружения.

    Notes
    -----
    В локальной разработке значения могут браться из файла `.env`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field("ergotype")
    app_env: str = Field("local")
    log_level: str = Field("INFO")

    api_host: str = Field("0.0.0.0")
    api_port: int = Field(8000)

    run_migrations_on_startup: bool = Field(False)
    migrations_wait_tries: int = Field(60, ge=1)
    migrations_wait_sleep_seconds: float = Field(1.0, gt=0)

    secret_key: SecretStr = Field(..., min_length=32)
    algorithm: str = Field("HS256")
    access_token_expire_days: int = Field(7, ge=1)
    auth_cookie_name: str = Field("token")

    password_hash_iterations: int = Field(200_000, ge=1_000)

    cors_allow_origins: str = Field("http://localhost:5173")
    cors_allow_methods: str = Field("*")
    cors_allow_headers: str = Field("*")
    cors_allow_credentials: bool = Field(True)

    rate_limit_enabled: bool = Field(True)
    rate_limit_backend: str = Field("memory")
    rate_limit_window_seconds: int = Field(15 * 60, ge=1)
    rate_limit_max_requests: int = Field(100, ge=1)
    rate_limit_trust_forwarded_for: bool = Field(False)

    # DB settings
    postgres_host: str = "db"
    postgres_port: int = Field(5432, ge=1, le=65535)
    postgres_db: str = "ergotype"
    postgres_user: str = "postgres"
    postgres_password: SecretStr | None = None

    # Redis settings (только для rate limit backend=redis)
    redis_host: str = "redis"
    redis_port: int = Field(6379, ge=1, le=65535)
    redis_db: int = Field(0, ge=0)

    database_url: str | None = None
    database_async_url: str | None = None

    @field_validator("secret_key")
    @classmethod
    def _validate_secret_key(cls, value: SecretStr) -> SecretStr:
        secret = value.get_secret_value()
        if len(secret.strip()) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters long")
        return value

    @property
    def is_production(self) -> bool:
        """True, если приложение запущено в продакшен-окружении."""

        return self.app_env.strip().lower() in _PRODUCTION_ENVS

    @property
    def access_token_max_age_seconds(self) -> int:
        """Срок жизни токена (и cookie) в секундах."""

        return self.access_token_expire_days * 24 * 60 * 60

    @property
    def postgres_dsn(self) -> str:
        """Build PostgreSQL DSN from component settings."""

        if self.postgres_password is None:
            raise ValueError(
                "POSTGRES_PASSWORD is required when DATABASE_URL is not set",
            )
        password = self.postgres_password.get_secret_value()
        return (
            f"postgresql://{self.postgres_user}:{password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def redis_dsn(self) -> str:
        """Build Redis DSN from component settings."""

        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def cors_origins_list(self) -> list[str]:
        """Список разрешённых origins для CORS."""

        return _split_csv(self.cors_allow_origins)

    @property
    def cors_methods_list(self) -> list[str]:
        """Список разрешённых методов для CORS."""

        return _split_csv(self.cors_allow_methods)

    @property
    def cors_headers_list(self) -> list[str]:
        """Список разрешённых заголовков для CORS."""

        return _split_csv(self.cors_allow_headers)

    @property
    def sqlalchemy_url(self) -> str:
        """Вернуть sync URL подключения к БД (для Alembic).

        Priority
        --------
        1) `DATABASE_URL`, если задан.
        2) Иначе собирается DSN PostgreSQL из компонентных env-переменных.
        """

        return self.database_url or self.postgres_dsn

    @property
    def sqlalchemy_async_url(self) -> str:
        """Вернуть async URL подключения к БД для SQLAlchemy AsyncEngine.

        Priority
        --------
        1) `DATABASE_ASYNC_URL`, если задан.
        2) Иначе строится из `DATABASE_URL`/Postgres DSN:
           - `postgresql://...` -> `postgresql+asyncpg://...`
           - `sqlite+pysqlite://...` -> `sqlite+aiosqlite://...`
        """

        url = self.database_async_url or self.sqlalchemy_url
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite+pysqlite://"):
            return url.replace("sqlite+pysqlite://", "sqlite+aiosqlite://", 1)
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Вернуть кэшированный экземпляр настроек.

    Returns
    -------
    Settings
        Настройки приложения.

    Raises
    ------
    FatalConfigError
        Если окружение не проходит валидацию (например, нет `SECRET_KEY`).
    """

    try:
        return Settings()
    except ValidationError as exc:
        failed = sorted(
            {str(err["loc"][0]).upper() for err in exc.errors() if err.get("loc")}
        )
        raise FatalConfigError(
            f"invalid configuration: {', '.join(failed) or 'unknown'}",
        ) from exc
