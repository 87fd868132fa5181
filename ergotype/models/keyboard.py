"""Модель клавиатуры каталога."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Float, Integer, String, Text, false, text, true
from sqlalchemy.orm import Mapped, mapped_column

from ergotype.db.base import Base, TimestampMixin


def _default_uuid() -> str:
    """Сгенерировать UUID в строковом виде."""

    return str(uuid4())


class Keyboard(TimestampMixin, Base):
    """Клавиатура в каталоге.

    Attributes
    ----------
    id : str
        UUID клавиатуры.
    name, brand, layout : str
        Название, бренд и раскладка.
    price : float
        Цена (> 0).
    in_stock : bool
        Есть ли в наличии.
    stock_count : int
        Количество на складе.
    """

    __tablename__ = "keyboards"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=_default_uuid,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    brand: Mapped[str] = mapped_column(String(255), nullable=False)
    layout: Mapped[str] = mapped_column(String(64), nullable=False)
    switches: Mapped[str | None] = mapped_column(String(255), nullable=True)
    keycaps: Mapped[str | None] = mapped_column(String(255), nullable=True)
    wireless: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False,
    )
    rgb: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False,
    )
    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    in_stock: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default=true(),
        nullable=False,
    )
    stock_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default=text("0"),
        nullable=False,
    )
