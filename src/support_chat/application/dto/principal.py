from __future__ import annotations

from dataclasses import dataclass, field

from support_chat.domain.value_objects.enums import Role


def identity_key(role: str, subject_id: int) -> str:
    """Registry key for a live connection, e.g. ``admin:7``."""
    return f"{role}:{subject_id}"


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    kind: Role
    subject_id: int
    roles: list[str] = field(default_factory=list)
    username: str | None = None
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.kind == Role.ADMIN or "admin" in self.roles

    @property
    def role(self) -> Role:
        """Role used for sender labels and read-marking."""
        return Role.ADMIN if self.is_admin else Role.USER

    @property
    def principal_key(self) -> str:
        return identity_key(self.role, self.subject_id)
