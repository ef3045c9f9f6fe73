from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class SupportSession:
    id: UUID
    session_id: str
    owner_user_id: int
    owner_username: str | None
    owner_email: str | None
    assigned_admin_id: int | None
    status: str
    created_at: datetime
    updated_at: datetime
