"""Заполнить каталог демо-клавиатурами.

Usage
-----
`python -m ergotype.scripts.seed`
"""

from __future__ import annotations

import asyncio

from ergotype.core.config import get_settings
from ergotype.core.logging import setup_logging
from ergotype.db.session import get_async_engine, get_sessionmaker
from ergotype.services.keyboards import seed_demo_keyboards


async def _main() -> int:
    try:
        async with get_sessionmaker()() as db:
            return await seed_demo_keyboards(db)
    finally:
        await get_async_engine().dispose()


def main() -> None:
    setup_logging(get_settings().log_level)
    asyncio.run(_main())


if __name__ == "__main__":
    main()
