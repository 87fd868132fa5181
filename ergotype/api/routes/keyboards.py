"""Эндпоинты каталога клавиатур."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ergotype.core.errors import NotFoundError
from ergotype.db.session import get_db
from ergotype.models.keyboard import Keyboard
from ergotype.schemas.keyboards import KeyboardCreate, KeyboardOut, KeyboardUpdate
from ergotype.services.keyboards import (
    create_keyboard,
    delete_keyboard,
    get_keyboard,
    list_keyboards,
    update_keyboard,
)

router = APIRouter()


async def _get_keyboard_or_404(db: AsyncSession, keyboard_id: str) -> Keyboard:
    keyboard = await get_keyboard(db, keyboard_id=keyboard_id)
    if keyboard is None:
        raise NotFoundError("Keyboard not found")
    return keyboard


@router.get("", response_model=list[KeyboardOut])
async def list_keyboards_endpoint(db: AsyncSession = Depends(get_db)) -> list[KeyboardOut]:
    """Получить каталог (новые первыми)."""

    keyboards = await list_keyboards(db)
    return [KeyboardOut.model_validate(keyboard) for keyboard in keyboards]


@router.get("/{keyboard_id}", response_model=KeyboardOut)
async def get_keyboard_endpoint(
    keyboard_id: str,
    db: AsyncSession = Depends(get_db),
) -> KeyboardOut:
    """Получить клавиатуру по `keyboard_id`.

    Raises
    ------
    NotFoundError
        404, если клавиатура не найдена.
    """

    keyboard = await _get_keyboard_or_404(db, keyboard_id)
    return KeyboardOut.model_validate(keyboard)


@router.post("", response_model=KeyboardOut, status_code=status.HTTP_201_CREATED)
async def create_keyboard_endpoint(
    payload: KeyboardCreate,
    db: AsyncSession = Depends(get_db),
) -> KeyboardOut:
    """Создать клавиатуру."""

    keyboard = await create_keyboard(db, payload)
    return KeyboardOut.model_validate(keyboard)


@router.put("/{keyboard_id}", response_model=KeyboardOut)
async def update_keyboard_endpoint(
    keyboard_id: str,
    payload: KeyboardUpdate,
    db: AsyncSession = Depends(get_db),
) -> KeyboardOut:
    """Обновить переданные поля клавиатуры.

    Raises
    ------
    NotFoundError
        404, если клавиатура не найдена.
    """

    keyboard = await _get_keyboard_or_404(db, keyboard_id)
    keyboard = await update_keyboard(db, keyboard=keyboard, payload=payload)
    return KeyboardOut.model_validate(keyboard)


@router.delete("/{keyboard_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_keyboard_endpoint(
    keyboard_id: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Удалить клавиатуру.

    Raises
    ------
    NotFoundError
        404, если клавиатура не найдена.
    """

    keyboard = await _get_keyboard_or_404(db, keyboard_id)
    await delete_keyboard(db, keyboard=keyboard)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
