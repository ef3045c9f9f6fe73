"""Create the chat tables if they don't exist yet."""
from __future__ import annotations

import asyncio
import logging

from support_chat.infrastructure.db import models  # noqa: F401
from support_chat.infrastructure.db.base import Base
from support_chat.infrastructure.db.session import engine

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(create_tables())


if __name__ == "__main__":
    main()
