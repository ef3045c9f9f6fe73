from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone

from support_chat.application.dto.principal import Principal, identity_key
from support_chat.application.dto.session import SessionDetail, SessionFilterDTO, SessionPage
from support_chat.application.exceptions import (
    ForbiddenError,
    NotFoundError,
    QueryTimeoutError,
    ValidationError,
)
from support_chat.application.policies import lifecycle
from support_chat.application.policies.permissions import assert_admin, assert_session_access
from support_chat.application.ports.relay import MessageRelay
from support_chat.application.uow import UnitOfWork
from support_chat.domain.entities.message import Message
from support_chat.domain.entities.session import SupportSession
from support_chat.domain.value_objects.enums import Role, SenderRole, SessionStatus
from support_chat.domain.value_objects.session_id import is_valid_session_id, new_session_id
from support_chat.services.notifications import (
    SESSION_UPDATED,
    counterpart_of,
    notify,
    session_payload,
)

logger = logging.getLogger(__name__)


def require_session_id(session_id: str) -> str:
    if not is_valid_session_id(session_id):
        raise ValidationError("Malformed session id, expected 'session_<ms>_<suffix>'")
    return session_id


async def load_session(session_id: str, principal: Principal, uow: UnitOfWork) -> SupportSession:
    """Fetch a session the principal may act on, or raise NotFound / Forbidden."""
    require_session_id(session_id)
    session = await uow.sessions.get_by_session_id(session_id)
    return assert_session_access(principal, session)


def _system_message(session: SupportSession, content: str, now: datetime) -> Message:
    return Message(
        id=uuid.uuid4(),
        session_pk=session.id,
        sender=SenderRole.SYSTEM,
        content=content,
        read=False,
        created_at=now,
    )


async def create_session(
    principal: Principal,
    initial_message: str | None,
    uow: UnitOfWork,
) -> SupportSession:
    """Open a new ``waiting`` session owned by the caller."""
    if principal.is_admin:
        raise ForbiddenError("Admins cannot open support sessions")

    now = datetime.now(timezone.utc)
    session = SupportSession(
        id=uuid.uuid4(),
        session_id=new_session_id(),
        owner_user_id=principal.subject_id,
        owner_username=principal.username,
        owner_email=principal.email,
        assigned_admin_id=None,
        status=SessionStatus.WAITING,
        created_at=now,
        updated_at=now,
    )
    session = await uow.sessions_w.create(session)

    if initial_message and initial_message.strip():
        await uow.messages_w.append(
            Message(
                id=uuid.uuid4(),
                session_pk=session.id,
                sender=SenderRole.USER,
                content=initial_message,
                read=False,
                created_at=now,
            )
        )

    await uow.commit()
    logger.info("Session %s opened by user %d", session.session_id, principal.subject_id)
    return session


async def get_session(
    session_id: str,
    principal: Principal,
    uow: UnitOfWork,
) -> SessionDetail:
    """Return the session with its messages, marking the counterpart's messages read."""
    session = await load_session(session_id, principal, uow)

    try:
        await uow.messages_w.mark_read(session.id, principal.role)
        await uow.commit()
    except Exception:
        logger.warning("Read-marking failed for %s", session_id, exc_info=True)
        await uow.rollback()

    messages = await uow.messages.list_for_session(session.id)
    return SessionDetail(session=session, messages=messages)


async def list_sessions(
    principal: Principal,
    limit: int,
    uow: UnitOfWork,
) -> list[SupportSession]:
    if principal.is_admin:
        return await uow.sessions.list_for_admin(principal.subject_id, limit=limit)
    return await uow.sessions.list_for_owner(principal.subject_id, limit=limit)


async def close_session(
    session_id: str,
    principal: Principal,
    relay: MessageRelay,
    uow: UnitOfWork,
) -> SupportSession:
    session = await load_session(session_id, principal, uow)
    if session.status == SessionStatus.CLOSED:
        return session

    now = datetime.now(timezone.utc)
    closed = lifecycle.close(session, now)
    await uow.sessions_w.save_state(closed)
    await uow.messages_w.append(
        _system_message(closed, f"Session closed by {principal.role}", now)
    )
    await uow.commit()
    logger.info("Session %s closed by %s", session_id, principal.principal_key)

    await notify(relay, counterpart_of(closed, principal.role), SESSION_UPDATED, session_payload(closed))
    return closed


async def assign_admin(
    session_id: str,
    admin_id: int,
    principal: Principal,
    relay: MessageRelay,
    uow: UnitOfWork,
) -> SupportSession:
    assert_admin(principal)
    require_session_id(session_id)
    session = await uow.sessions.get_by_session_id(session_id)
    if session is None:
        raise NotFoundError("Session not found")

    now = datetime.now(timezone.utc)
    assigned = lifecycle.claim_and_activate(session, admin_id, now)
    await uow.sessions_w.save_state(assigned)
    await uow.commit()
    logger.info(
        "Session %s assigned to admin %d (previous=%s) by %s",
        session_id, admin_id, session.assigned_admin_id, principal.principal_key,
    )

    payload = session_payload(assigned)
    await notify(relay, identity_key(Role.USER, assigned.owner_user_id), SESSION_UPDATED, payload)
    if admin_id != principal.subject_id:
        await notify(relay, identity_key(Role.ADMIN, admin_id), SESSION_UPDATED, payload)
    return assigned


def admin_filters(
    status: SessionStatus,
    page: int,
    limit: int,
    search: str | None,
    *,
    max_page_size: int,
) -> SessionFilterDTO:
    """Clamp paging input instead of rejecting it."""
    term = search.strip() if search else None
    return SessionFilterDTO(
        status=status,
        page=max(1, page),
        page_size=min(max(1, limit), max_page_size),
        search=term or None,
    )


async def list_admin_sessions(
    filters: SessionFilterDTO,
    principal: Principal,
    uow: UnitOfWork,
    *,
    timeout: float,
) -> SessionPage:
    assert_admin(principal)

    async def _query() -> tuple[list[SupportSession], int]:
        items = await uow.sessions.search(filters)
        total = await uow.sessions.count(filters)
        return items, total

    try:
        items, total = await asyncio.wait_for(_query(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("Admin session query timed out after %.1fs: %s", timeout, filters)
        raise QueryTimeoutError(
            "Session query timed out, narrow the filters or try again later"
        ) from exc

    valid = [s for s in items if is_valid_session_id(s.session_id)]
    if len(valid) != len(items):
        logger.warning("Skipped %d sessions with malformed ids", len(items) - len(valid))

    return SessionPage(items=valid, page=filters.page, page_size=filters.page_size, total=total)
