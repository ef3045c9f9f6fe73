from __future__ import annotations

from datetime import datetime, timezone

import pytest

from support_chat.application.dto.principal import Principal
from support_chat.application.exceptions import ConflictError, ForbiddenError, NotFoundError
from support_chat.application.policies import lifecycle
from support_chat.application.policies.permissions import assert_session_access, can_access
from support_chat.domain.value_objects.enums import Role, SessionStatus
from tests.conftest import hours_ago, make_session

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_claim_activates_waiting_session():
    session = make_session(updated_at=hours_ago(1))

    claimed = lifecycle.claim_and_activate(session, 7, NOW)

    assert claimed.status == SessionStatus.ACTIVE
    assert claimed.assigned_admin_id == 7
    assert claimed.updated_at == NOW
    assert session.status == SessionStatus.WAITING


def test_claim_overwrites_previous_assignee():
    session = make_session(assignee=3, status=SessionStatus.ACTIVE)

    assert lifecycle.claim_and_activate(session, 4, NOW).assigned_admin_id == 4


def test_user_message_keeps_assignee():
    session = make_session(assignee=3, status=SessionStatus.ACTIVE)

    touched = lifecycle.activate_on_message(session, NOW)

    assert touched.assigned_admin_id == 3
    assert touched.updated_at == NOW


@pytest.mark.parametrize("transition", [
    lambda s: lifecycle.claim_and_activate(s, 1, NOW),
    lambda s: lifecycle.activate_on_message(s, NOW),
])
def test_closed_is_terminal(transition):
    with pytest.raises(ConflictError):
        transition(make_session(status=SessionStatus.CLOSED))


def test_close_twice_returns_same_session():
    closed = lifecycle.close(make_session(), NOW)

    assert closed.status == SessionStatus.CLOSED
    assert lifecycle.close(closed, datetime.now(timezone.utc)) is closed


def test_admin_role_claim_counts_as_admin():
    principal = Principal(kind=Role.USER, subject_id=5, roles=["admin"])

    assert principal.is_admin
    assert principal.principal_key == "admin:5"


def test_admin_with_same_id_as_owner_is_not_owner():
    admin = Principal(kind=Role.ADMIN, subject_id=42)
    session = make_session(owner=42, assignee=9)

    assert can_access(admin, session) is False


def test_access_errors_distinguish_missing_from_forbidden(stranger):
    with pytest.raises(NotFoundError):
        assert_session_access(stranger, None)
    with pytest.raises(ForbiddenError):
        assert_session_access(stranger, make_session())
