from __future__ import annotations

from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from support_chat.application.dto.session import SessionFilterDTO
from support_chat.domain.entities.session import SupportSession
from support_chat.domain.value_objects.enums import Role, SessionStatus
from support_chat.infrastructure.db.mappers import session as mapper
from support_chat.infrastructure.db.models.message import SessionMessageModel
from support_chat.infrastructure.db.models.session import SupportSessionModel


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _apply_filters(stmt: Select, filters: SessionFilterDTO) -> Select:
    stmt = stmt.where(SupportSessionModel.status == filters.status.value)
    if filters.search:
        pattern = _like_pattern(filters.search)
        stmt = stmt.where(
            or_(
                SupportSessionModel.owner_username.ilike(pattern, escape="\\"),
                SupportSessionModel.owner_email.ilike(pattern, escape="\\"),
            )
        )
    return stmt


class SessionReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_session_id(self, session_id: str) -> SupportSession | None:
        stmt = select(SupportSessionModel).where(SupportSessionModel.session_id == session_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_owner(self, user_id: int, *, limit: int = 20) -> list[SupportSession]:
        stmt = (
            select(SupportSessionModel)
            .where(SupportSessionModel.owner_user_id == user_id)
            .order_by(SupportSessionModel.updated_at.desc(), SupportSessionModel.id)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_for_admin(self, admin_id: int, *, limit: int = 20) -> list[SupportSession]:
        stmt = (
            select(SupportSessionModel)
            .where(SupportSessionModel.assigned_admin_id == admin_id)
            .order_by(SupportSessionModel.updated_at.desc(), SupportSessionModel.id)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def search(self, filters: SessionFilterDTO) -> list[SupportSession]:
        stmt = _apply_filters(select(SupportSessionModel), filters)
        stmt = (
            stmt.order_by(SupportSessionModel.updated_at.desc(), SupportSessionModel.id)
            .offset(filters.offset)
            .limit(filters.page_size)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count(self, filters: SessionFilterDTO) -> int:
        stmt = _apply_filters(select(func.count(SupportSessionModel.id)), filters)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def count_unread(self, role: str, subject_id: int) -> int:
        if role == Role.ADMIN:
            scope = SupportSessionModel.assigned_admin_id == subject_id
        else:
            scope = SupportSessionModel.owner_user_id == subject_id
        stmt = (
            select(func.count(SessionMessageModel.id))
            .join(
                SupportSessionModel,
                SupportSessionModel.id == SessionMessageModel.session_pk,
            )
            .where(
                scope,
                SupportSessionModel.status != SessionStatus.CLOSED,
                SessionMessageModel.sender != role,
                SessionMessageModel.read.is_(False),
            )
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class SessionWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, session: SupportSession) -> SupportSession:
        model = mapper.entity_to_model(session)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def save_state(self, session: SupportSession) -> None:
        stmt = (
            update(SupportSessionModel)
            .where(SupportSessionModel.id == session.id)
            .values(
                status=session.status,
                assigned_admin_id=session.assigned_admin_id,
                updated_at=session.updated_at,
            )
        )
        await self._session.execute(stmt)
