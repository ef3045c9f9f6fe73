from __future__ import annotations

import math
from dataclasses import dataclass

from support_chat.domain.entities.message import Message
from support_chat.domain.entities.session import SupportSession
from support_chat.domain.value_objects.enums import SessionStatus


@dataclass(frozen=True, slots=True)
class SessionDetail:
    session: SupportSession
    messages: list[Message]


@dataclass(frozen=True, slots=True)
class SessionFilterDTO:
    status: SessionStatus = SessionStatus.ACTIVE
    page: int = 1
    page_size: int = 20
    search: str | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True, slots=True)
class SessionPage:
    items: list[SupportSession]
    page: int
    page_size: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0
