from __future__ import annotations

from fastapi import APIRouter

from support_chat.api.deps import CurrentPrincipal, RelayDep, UoWDep
from support_chat.api.v1.schemas.message import (
    MarkReadResponse,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    UnreadCountResponse,
)
from support_chat.services import message_service

router = APIRouter(prefix="/api/v1/chat", tags=["messages"])


@router.post(
    "/sessions/{session_id}/messages",
    response_model=SendMessageResponse,
    status_code=201,
)
async def send_message(
    session_id: str,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    relay: RelayDep,
    uow: UoWDep,
) -> SendMessageResponse:
    msg = await message_service.append_message(
        session_id, principal, body.content, relay, uow,
    )
    return SendMessageResponse(
        message_id=msg.id,
        message=MessageResponse.model_validate(msg, from_attributes=True),
    )


@router.patch("/sessions/{session_id}/mark-read", response_model=MarkReadResponse)
async def mark_read(
    session_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MarkReadResponse:
    updated = await message_service.mark_read(session_id, principal, uow)
    return MarkReadResponse(updated=updated)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> UnreadCountResponse:
    count = await message_service.count_unread(principal, uow)
    return UnreadCountResponse(unread_count=count)
