"""Схемы каталога клавиатур.

Поля в JSON — camelCase (`imageUrl`, `inStock`, `stockCount`).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

_NON_NULLABLE = frozenset(
    {"name", "price", "brand", "layout", "wireless", "rgb", "in_stock", "stock_count"},
)


class _CamelInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KeyboardCreate(_CamelInput):
    """Данные новой клавиатуры."""

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: float = Field(gt=0, allow_inf_nan=False)
    brand: str = Field(min_length=1, max_length=255)
    layout: str = Field(min_length=1, max_length=64)
    switches: str | None = Field(None, max_length=255)
    keycaps: str | None = Field(None, max_length=255)
    wireless: bool = False
    rgb: bool = False
    image_url: HttpUrl | None = None
    in_stock: bool = True
    stock_count: int = Field(0, ge=0)


class KeyboardUpdate(_CamelInput):
    """Частичное обновление: меняются только переданные поля.

    Nullable-поля (`description`, `switches`, `keycaps`, `imageUrl`) можно
    явно сбросить в null, остальные — нет.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price: float | None = Field(None, gt=0, allow_inf_nan=False)
    brand: str | None = Field(None, min_length=1, max_length=255)
    layout: str | None = Field(None, min_length=1, max_length=64)
    switches: str | None = Field(None, max_length=255)
    keycaps: str | None = Field(None, max_length=255)
    wireless: bool | None = None
    rgb: bool | None = None
    image_url: HttpUrl | None = None
    in_stock: bool | None = None
    stock_count: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def _reject_explicit_nulls(self) -> KeyboardUpdate:
        for name in sorted(self.model_fields_set & _NON_NULLABLE):
            if getattr(self, name) is None:
                raise PydanticCustomError(
                    "null_not_allowed",
                    "{field} cannot be null",
                    {"field": to_camel(name)},
                )
        return self


class KeyboardOut(BaseModel):
    """Клавиатура в ответе API."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    name: str
    description: str | None
    price: float
    brand: str
    layout: str
    switches: str | None
    keycaps: str | None
    wireless: bool
    rgb: bool
    image_url: str | None
    in_stock: bool
    stock_count: int
    created_at: datetime
    updated_at: datetime
