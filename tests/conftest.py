"""Shared test fixtures."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import pytest

from support_chat.application.dto.principal import Principal
from support_chat.application.dto.session import SessionFilterDTO
from support_chat.domain.entities.message import Message
from support_chat.domain.entities.session import SupportSession
from support_chat.domain.value_objects.enums import Role, SenderRole, SessionStatus
from support_chat.domain.value_objects.session_id import new_session_id


@pytest.fixture
def user_principal() -> Principal:
    return Principal(kind=Role.USER, subject_id=42, roles=[], username="alice", email="alice@example.com")


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(kind=Role.ADMIN, subject_id=1, roles=["admin"])


@pytest.fixture
def other_admin() -> Principal:
    return Principal(kind=Role.ADMIN, subject_id=2, roles=["admin"])


@pytest.fixture
def stranger() -> Principal:
    return Principal(kind=Role.USER, subject_id=999, roles=[])


def make_session(
    *,
    session_id: str | None = None,
    owner: int = 42,
    status: str = SessionStatus.WAITING,
    assignee: int | None = None,
    username: str | None = "alice",
    email: str | None = "alice@example.com",
    updated_at: datetime | None = None,
) -> SupportSession:
    now = datetime.now(timezone.utc)
    return SupportSession(
        id=uuid.uuid4(),
        session_id=session_id or new_session_id(),
        owner_user_id=owner,
        owner_username=username,
        owner_email=email,
        assigned_admin_id=assignee,
        status=status,
        created_at=now,
        updated_at=updated_at or now,
    )


def make_message(
    session: SupportSession,
    *,
    sender: str = SenderRole.USER,
    content: str = "hello",
    read: bool = False,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        session_pk=session.id,
        sender=sender,
        content=content,
        read=read,
        created_at=datetime.now(timezone.utc),
    )


@dataclass
class FakeSessionReader:
    _store: dict[UUID, SupportSession] = field(default_factory=dict)
    _messages: list[Message] = field(default_factory=list)

    def add(self, session: SupportSession) -> SupportSession:
        self._store[session.id] = session
        return session

    async def get_by_session_id(self, session_id: str) -> SupportSession | None:
        for s in self._store.values():
            if s.session_id == session_id:
                return s
        return None

    async def list_for_owner(self, user_id: int, *, limit: int = 20) -> list[SupportSession]:
        found = [s for s in self._store.values() if s.owner_user_id == user_id]
        return sorted(found, key=lambda s: s.updated_at, reverse=True)[:limit]

    async def list_for_admin(self, admin_id: int, *, limit: int = 20) -> list[SupportSession]:
        found = [s for s in self._store.values() if s.assigned_admin_id == admin_id]
        return sorted(found, key=lambda s: s.updated_at, reverse=True)[:limit]

    def _filtered(self, filters: SessionFilterDTO) -> list[SupportSession]:
        found = [s for s in self._store.values() if s.status == filters.status]
        if filters.search:
            term = filters.search.lower()
            found = [
                s for s in found
                if term in (s.owner_username or "").lower() or term in (s.owner_email or "").lower()
            ]
        return sorted(found, key=lambda s: s.updated_at, reverse=True)

    async def search(self, filters: SessionFilterDTO) -> list[SupportSession]:
        found = self._filtered(filters)
        return found[filters.offset:filters.offset + filters.page_size]

    async def count(self, filters: SessionFilterDTO) -> int:
        return len(self._filtered(filters))

    async def count_unread(self, role: str, subject_id: int) -> int:
        if role == Role.ADMIN:
            scope = {s.id for s in self._store.values() if s.assigned_admin_id == subject_id}
        else:
            scope = {s.id for s in self._store.values() if s.owner_user_id == subject_id}
        scope = {pk for pk in scope if self._store[pk].status != SessionStatus.CLOSED}
        return sum(
            1 for m in self._messages
            if m.session_pk in scope and m.sender != role and not m.read
        )


@dataclass
class FakeSessionWriter:
    _reader: FakeSessionReader

    async def create(self, session: SupportSession) -> SupportSession:
        self._reader._store[session.id] = session
        return session

    async def save_state(self, session: SupportSession) -> None:
        current = self._reader._store[session.id]
        self._reader._store[session.id] = replace(
            current,
            status=session.status,
            assigned_admin_id=session.assigned_admin_id,
            updated_at=session.updated_at,
        )


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    async def list_for_session(self, session_pk: UUID) -> list[Message]:
        return [m for m in self._messages if m.session_pk == session_pk]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    fail_mark_read: bool = False

    async def append(self, message: Message) -> Message:
        self._reader._messages.append(message)
        return message

    async def mark_read(self, session_pk: UUID, reader_role: str) -> int:
        if self.fail_mark_read:
            raise RuntimeError("storage unavailable")
        changed = 0
        for i, m in enumerate(self._reader._messages):
            if m.session_pk == session_pk and m.sender != reader_role and not m.read:
                self._reader._messages[i] = replace(m, read=True)
                changed += 1
        return changed


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    sessions: FakeSessionReader | None = None
    sessions_w: FakeSessionWriter | None = None
    commits: int = 0
    rollbacks: int = 0

    def __post_init__(self) -> None:
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)
        if self.sessions is None:
            # shares the message list so unread counts see appends
            self.sessions = FakeSessionReader(_messages=self.messages._messages)
        if self.sessions_w is None:
            self.sessions_w = FakeSessionWriter(self.sessions)

    @property
    def _committed(self) -> bool:
        return self.commits > 0

    def stored(self, session: SupportSession) -> SupportSession:
        return self.sessions._store[session.id]

    def messages_of(self, session: SupportSession) -> list[Message]:
        return [m for m in self.messages._messages if m.session_pk == session.id]

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


@dataclass
class FakeRelay:
    """Records deliveries; ``online`` lists identities that accept pushes."""
    online: set[str] = field(default_factory=set)
    deliveries: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)
    broken: bool = False

    async def deliver(self, recipient: str, event_type: str, data: dict[str, Any]) -> bool:
        if self.broken:
            raise ConnectionError("relay down")
        if recipient not in self.online:
            return False
        self.deliveries.append((recipient, event_type, data))
        return True


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def relay() -> FakeRelay:
    return FakeRelay()


def hours_ago(n: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(hours=n)
