"""Healthcheck эндпоинты."""

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Вернуть статус приложения.

    Returns
    -------
    dict
        JSON со статусом и текущим временем (UTC, ISO-8601).
    """

    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
