from __future__ import annotations

from typing import Protocol
from uuid import UUID

from support_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_for_session(self, session_pk: UUID) -> list[Message]:
        """All messages of a session in append order."""
        ...


class MessageWriter(Protocol):
    async def append(self, message: Message) -> Message: ...

    async def mark_read(self, session_pk: UUID, reader_role: str) -> int:
        """Set ``read`` on every message not sent by ``reader_role``. Returns rows changed."""
        ...
