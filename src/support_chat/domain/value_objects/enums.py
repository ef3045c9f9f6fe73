from __future__ import annotations

from enum import StrEnum


class SessionStatus(StrEnum):
    WAITING = "waiting"
    ACTIVE = "active"
    CLOSED = "closed"


class Role(StrEnum):
    USER = "user"
    ADMIN = "admin"


class SenderRole(StrEnum):
    USER = "user"
    ADMIN = "admin"
    SYSTEM = "system"
