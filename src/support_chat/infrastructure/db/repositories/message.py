from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from support_chat.domain.entities.message import Message
from support_chat.infrastructure.db.mappers import message as mapper
from support_chat.infrastructure.db.models.message import SessionMessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_session(self, session_pk: UUID) -> list[Message]:
        stmt = (
            select(SessionMessageModel)
            .where(SessionMessageModel.session_pk == session_pk)
            .order_by(SessionMessageModel.seq.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def mark_read(self, session_pk: UUID, reader_role: str) -> int:
        stmt = (
            update(SessionMessageModel)
            .where(
                SessionMessageModel.session_pk == session_pk,
                SessionMessageModel.sender != reader_role,
                SessionMessageModel.read.is_(False),
            )
            .values(read=True)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
