"""Настройка логирования (loguru + перехват stdlib logging)."""

import logging
import sys

from loguru import logger


class InterceptHandler(logging.Handler):
    """Перенаправить записи stdlib logging (uvicorn, SQLAlchemy) в loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(
            depth=depth,
            exception=record.exc_info,
        ).log(level, record.getMessage())


def setup_logging(level: str) -> None:
    """Настроить loguru и перехват stdlib logging.

    Parameters
    ----------
    level : str
        Уровень логирования (например, `INFO`).

    Notes
    -----
    `diagnose=False`: значения локальных переменных (пароли, токены) не
    попадают в трейсбеки логов.
    """

    logger.remove()
    logger.add(sys.stdout, level=level, enqueue=True, backtrace=False, diagnose=False)

    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(level)
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True
