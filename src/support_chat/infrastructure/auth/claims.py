"""Map decoded JWT claims to a Principal.

Accepts ``sub`` or the legacy ``userId`` claim, and ``kind`` or ``role``.
"""
from __future__ import annotations

from typing import Any

from support_chat.application.dto.principal import Principal
from support_chat.domain.value_objects.enums import Role


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    subject = payload.get("sub", payload.get("userId"))
    if subject is None:
        raise ValueError("Token has no subject")
    kind_raw = payload.get("kind", payload.get("role", "user"))
    kind = Role(kind_raw) if kind_raw in Role.__members__.values() else Role.USER
    return Principal(
        kind=kind,
        subject_id=int(subject),
        roles=list(payload.get("roles", [])),
        username=payload.get("username"),
        email=payload.get("email"),
    )
