from __future__ import annotations

from support_chat.application.dto.principal import Principal
from support_chat.application.exceptions import ForbiddenError, NotFoundError
from support_chat.domain.entities.session import SupportSession
from support_chat.domain.value_objects.enums import Role


def is_owner(principal: Principal, session: SupportSession) -> bool:
    return principal.role == Role.USER and principal.subject_id == session.owner_user_id


def can_access(principal: Principal, session: SupportSession) -> bool:
    if is_owner(principal, session):
        return True
    if not principal.is_admin:
        return False
    # An unassigned session is open to any admin so a reply can claim it.
    return session.assigned_admin_id in (None, principal.subject_id)


def assert_session_access(
    principal: Principal,
    session: SupportSession | None,
) -> SupportSession:
    """Raise if the session doesn't exist or principal has no access."""
    if session is None:
        raise NotFoundError("Session not found")
    if not can_access(principal, session):
        raise ForbiddenError("Not allowed to access this session")
    return session


def assert_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
