from __future__ import annotations

from typing import Protocol

from support_chat.application.dto.session import SessionFilterDTO
from support_chat.domain.entities.session import SupportSession


class SessionReader(Protocol):
    async def get_by_session_id(self, session_id: str) -> SupportSession | None: ...

    async def list_for_owner(self, user_id: int, *, limit: int = 20) -> list[SupportSession]: ...

    async def list_for_admin(self, admin_id: int, *, limit: int = 20) -> list[SupportSession]:
        """Sessions currently assigned to ``admin_id``."""
        ...

    async def search(self, filters: SessionFilterDTO) -> list[SupportSession]: ...

    async def count(self, filters: SessionFilterDTO) -> int: ...

    async def count_unread(self, role: str, subject_id: int) -> int:
        """Unread messages not sent by ``role`` across the caller's non-closed sessions."""
        ...


class SessionWriter(Protocol):
    async def create(self, session: SupportSession) -> SupportSession: ...

    async def save_state(self, session: SupportSession) -> None:
        """Persist ``status``, ``assigned_admin_id`` and ``updated_at``."""
        ...
