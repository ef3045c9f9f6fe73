from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    session_pk: UUID
    sender: str
    content: str
    read: bool
    created_at: datetime
