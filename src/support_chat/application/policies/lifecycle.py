"""Session status transitions.

    waiting --(assign | message)--> active --(close)--> closed
    waiting --(close)--> closed

``closed`` is terminal: nothing may be appended or reassigned afterwards.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from support_chat.application.exceptions import ConflictError
from support_chat.domain.entities.session import SupportSession
from support_chat.domain.value_objects.enums import SessionStatus


def assert_not_closed(session: SupportSession) -> None:
    if session.status == SessionStatus.CLOSED:
        raise ConflictError("Session is closed")


def claim_and_activate(
    session: SupportSession,
    admin_id: int,
    now: datetime,
) -> SupportSession:
    """Make ``admin_id`` the responsible admin and activate the session.

    Used both by explicit assignment and by an admin reply. Overwrites any
    previous assignee.
    """
    assert_not_closed(session)
    return replace(
        session,
        assigned_admin_id=admin_id,
        status=SessionStatus.ACTIVE,
        updated_at=now,
    )


def activate_on_message(session: SupportSession, now: datetime) -> SupportSession:
    """A user message flips ``waiting`` to ``active``."""
    assert_not_closed(session)
    return replace(session, status=SessionStatus.ACTIVE, updated_at=now)


def close(session: SupportSession, now: datetime) -> SupportSession:
    if session.status == SessionStatus.CLOSED:
        return session
    return replace(session, status=SessionStatus.CLOSED, updated_at=now)
