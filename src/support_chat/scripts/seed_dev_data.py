"""Seed development data: one waiting and one active support session."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone

from support_chat.domain.entities.message import Message
from support_chat.domain.entities.session import SupportSession
from support_chat.domain.value_objects.enums import SenderRole, SessionStatus
from support_chat.domain.value_objects.session_id import new_session_id
from support_chat.infrastructure.db.session import AsyncSessionLocal
from support_chat.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

_SESSIONS = [
    (42, "alice", None, SessionStatus.WAITING, [
        (SenderRole.USER, "Hi, my order hasn't arrived yet."),
    ]),
    (43, "bob", 1, SessionStatus.ACTIVE, [
        (SenderRole.USER, "How do I change my delivery address?"),
        (SenderRole.ADMIN, "Hello! Which order is it for?"),
        (SenderRole.USER, "Order #12345"),
    ]),
]


async def seed() -> None:
    async with AsyncSessionLocal() as db_session, SqlAlchemyUoW(db_session) as uow:
        for owner_id, username, admin_id, status, messages in _SESSIONS:
            now = datetime.now(timezone.utc)
            session = await uow.sessions_w.create(
                SupportSession(
                    id=uuid.uuid4(),
                    session_id=new_session_id(),
                    owner_user_id=owner_id,
                    owner_username=username,
                    owner_email=f"{username}@example.com",
                    assigned_admin_id=admin_id,
                    status=status,
                    created_at=now,
                    updated_at=now,
                )
            )
            for sender, content in messages:
                await uow.messages_w.append(
                    Message(
                        id=uuid.uuid4(),
                        session_pk=session.id,
                        sender=sender,
                        content=content,
                        read=False,
                        created_at=datetime.now(timezone.utc),
                    )
                )
            logger.info("Seeded %s with %d messages", session.session_id, len(messages))
        await uow.commit()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
