"""Backfill fresh tokens for sessions whose ``session_id`` is malformed.

Such rows are hidden from the admin listing; run with ``--apply`` to fix
them in place, otherwise only report what would change.
"""
from __future__ import annotations

import argparse
import asyncio
import logging

from sqlalchemy import select, update

from support_chat.domain.value_objects.session_id import is_valid_session_id, new_session_id
from support_chat.infrastructure.db.models.session import SupportSessionModel
from support_chat.infrastructure.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)


async def repair(*, apply: bool) -> int:
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(SupportSessionModel.id, SupportSessionModel.session_id)
        )
        broken = [(pk, sid) for pk, sid in result.all() if not is_valid_session_id(sid)]
        logger.info("Found %d sessions with malformed ids", len(broken))

        for pk, old in broken:
            new = new_session_id()
            logger.info("Session %s: %r -> %s%s", pk, old, new, "" if apply else " (dry run)")
            if apply:
                await session.execute(
                    update(SupportSessionModel)
                    .where(SupportSessionModel.id == pk)
                    .values(session_id=new)
                )

        if apply:
            await session.commit()
        return len(broken)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--apply", action="store_true", help="write the new ids")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)
    asyncio.run(repair(apply=args.apply))


if __name__ == "__main__":
    main()
