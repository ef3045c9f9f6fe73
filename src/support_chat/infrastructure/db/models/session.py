from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, Index, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from support_chat.infrastructure.db.base import Base


class SupportSessionModel(Base):
    __tablename__ = "support_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    session_id: Mapped[str] = mapped_column(String(64), nullable=False)
    owner_user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    owner_username: Mapped[str | None] = mapped_column(String(150), nullable=True)
    owner_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    assigned_admin_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="waiting")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    messages = relationship("SessionMessageModel", back_populates="session", lazy="noload")

    __table_args__ = (
        UniqueConstraint("session_id", name="uq_support_sessions_session_id"),
        Index("ix_support_sessions_owner", "owner_user_id"),
        Index("ix_support_sessions_admin", "assigned_admin_id"),
        Index("ix_support_sessions_status_updated", "status", updated_at.desc()),
    )
