"""Keyboard catalog business logic."""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ergotype.models.keyboard import Keyboard
from ergotype.schemas.keyboards import KeyboardCreate, KeyboardUpdate

DEMO_KEYBOARDS: tuple[dict[str, object], ...] = (
    {"name": "ErgoDox EZ", "brand": "ZSA", "layout": "split", "price": 354.0},
    {"name": "Moonlander Mark I", "brand": "ZSA", "layout": "split", "price": 365.0},
    {
        "name": "Kinesis Advantage360",
        "brand": "Kinesis",
        "layout": "split",
        "price": 449.0,
    },
    {"name": "Dactyl Manuform", "brand": "DIY", "layout": "split", "price": 250.0},
)


def _to_columns(data: dict[str, object]) -> dict[str, object]:
    """Привести значения схемы к типам колонок (HttpUrl -> str)."""

    if data.get("image_url") is not None:
        data["image_url"] = str(data["image_url"])
    return data


async def list_keyboards(db: AsyncSession) -> Sequence[Keyboard]:
    """Получить все клавиатуры, новые первыми."""

    result = await db.execute(
        select(Keyboard).order_by(Keyboard.created_at.desc(), Keyboard.id),
    )
    return result.scalars().all()


async def get_keyboard(db: AsyncSession, keyboard_id: str) -> Keyboard | None:
    """Получить клавиатуру по id."""

    return await db.get(Keyboard, keyboard_id)


async def create_keyboard(db: AsyncSession, payload: KeyboardCreate) -> Keyboard:
    """Создать клавиатуру.

    Parameters
    ----------
    db : sqlalchemy.ext.asyncio.AsyncSession
        Async сессия БД.
    payload : KeyboardCreate
        Проверенные данные.

    Returns
    -------
    Keyboard
        Созданная клавиатура.
    """

    keyboard = Keyboard(**_to_columns(payload.model_dump()))
    db.add(keyboard)
    await db.commit()
    await db.refresh(keyboard)
    logger.info("Keyboard created id={id}", id=keyboard.id)
    return keyboard


async def update_keyboard(
    db: AsyncSession,
    keyboard: Keyboard,
    payload: KeyboardUpdate,
) -> Keyboard:
    """Обновить только переданные поля клавиатуры."""

    for name, value in _to_columns(payload.model_dump(exclude_unset=True)).items():
        setattr(keyboard, name, value)
    await db.commit()
    await db.refresh(keyboard)
    return keyboard


async def delete_keyboard(db: AsyncSession, keyboard: Keyboard) -> None:
    """Удалить клавиатуру."""

    await db.delete(keyboard)
    await db.commit()
    logger.info("Keyboard deleted id={id}", id=keyboard.id)


async def seed_demo_keyboards(db: AsyncSession) -> int:
    """Заполнить каталог демо-данными, если он пуст.

    Returns
    -------
    int
        Сколько клавиатур добавлено.
    """

    count = await db.scalar(select(func.count()).select_from(Keyboard))
    if count:
        logger.info("Catalog already has {n} keyboards, skip seeding", n=count)
        return 0

    db.add_all(Keyboard(**item) for item in DEMO_KEYBOARDS)
    await db.commit()
    logger.info("Seeded {n} demo keyboards", n=len(DEMO_KEYBOARDS))
    return len(DEMO_KEYBOARDS)
