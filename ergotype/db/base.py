"""Declarative base для моделей SQLAlchemy."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Текущее время в UTC."""

    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Базовый класс всех моделей."""


class TimestampMixin:
    """Поля `created_at`/`updated_at`.

    `updated_at` обновляется при каждом изменении строки через ORM.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )
