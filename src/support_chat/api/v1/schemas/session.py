from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from support_chat.api.v1.schemas.message import MessageResponse
from support_chat.application.dto.session import SessionDetail


class CreateSessionRequest(BaseModel):
    initial_message: str | None = None


class CreateSessionResponse(BaseModel):
    session_id: str
    id: UUID


class SessionResponse(BaseModel):
    id: UUID
    session_id: str
    owner_user_id: int
    owner_username: str | None
    owner_email: str | None
    assigned_admin_id: int | None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SessionDetailResponse(SessionResponse):
    messages: list[MessageResponse]

    @classmethod
    def from_detail(cls, detail: SessionDetail) -> SessionDetailResponse:
        base = SessionResponse.model_validate(detail.session, from_attributes=True)
        return cls(
            **base.model_dump(),
            messages=[MessageResponse.model_validate(m, from_attributes=True) for m in detail.messages],
        )
