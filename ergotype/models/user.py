"""Модель пользователя."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ergotype.db.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """Зарегистрированный аккаунт.

    Attributes
    ----------
    id : int
        Идентификатор пользователя.
    email : str
        Email (уникальный, регистр значим).
    password_hash : str
        Хэш пароля. Никогда не отдаётся в ответах API.
    created_at : datetime
        Дата создания.
    updated_at : datetime
        Дата последнего изменения.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(
        String(320),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, email={self.email!r})"
