from __future__ import annotations

from fastapi import APIRouter, Query

from support_chat.api.deps import CurrentPrincipal, RelayDep, UoWDep
from support_chat.api.v1.schemas.session import (
    CreateSessionRequest,
    CreateSessionResponse,
    SessionDetailResponse,
    SessionResponse,
)
from support_chat.services import session_service

router = APIRouter(prefix="/api/v1/chat/sessions", tags=["sessions"])


@router.post("", response_model=CreateSessionResponse, status_code=201)
async def create_session(
    principal: CurrentPrincipal,
    uow: UoWDep,
    body: CreateSessionRequest | None = None,
) -> CreateSessionResponse:
    initial = body.initial_message if body else None
    session = await session_service.create_session(principal, initial, uow)
    return CreateSessionResponse(session_id=session.session_id, id=session.id)


@router.get("", response_model=list[SessionResponse])
async def list_sessions(
    principal: CurrentPrincipal,
    uow: UoWDep,
    limit: int = Query(20, ge=1, le=100),
) -> list[SessionResponse]:
    sessions = await session_service.list_sessions(principal, limit, uow)
    return [SessionResponse.model_validate(s, from_attributes=True) for s in sessions]


@router.get("/{session_id}", response_model=SessionDetailResponse)
async def get_session(
    session_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> SessionDetailResponse:
    detail = await session_service.get_session(session_id, principal, uow)
    return SessionDetailResponse.from_detail(detail)


@router.patch("/{session_id}/close", response_model=SessionResponse)
async def close_session(
    session_id: str,
    principal: CurrentPrincipal,
    relay: RelayDep,
    uow: UoWDep,
) -> SessionResponse:
    session = await session_service.close_session(session_id, principal, relay, uow)
    return SessionResponse.model_validate(session, from_attributes=True)
