from __future__ import annotations

from fastapi import APIRouter, Query

from support_chat.api.deps import CurrentAdmin, RelayDep, UoWDep
from support_chat.api.v1.schemas.admin import AssignSessionRequest
from support_chat.api.v1.schemas.common import PageMeta, PaginatedResponse
from support_chat.api.v1.schemas.session import SessionResponse
from support_chat.config import settings
from support_chat.domain.value_objects.enums import SessionStatus
from support_chat.services import session_service

router = APIRouter(prefix="/api/v1/chat/admin/sessions", tags=["admin"])


@router.get("", response_model=PaginatedResponse[SessionResponse])
async def list_sessions(
    admin: CurrentAdmin,
    uow: UoWDep,
    status: SessionStatus = Query(SessionStatus.ACTIVE),
    page: int = Query(1),
    limit: int = Query(20),
    search: str | None = Query(None),
) -> PaginatedResponse[SessionResponse]:
    filters = session_service.admin_filters(
        status, page, limit, search, max_page_size=settings.ADMIN_PAGE_SIZE_MAX,
    )
    result = await session_service.list_admin_sessions(
        filters, admin, uow, timeout=settings.ADMIN_QUERY_TIMEOUT_SECONDS,
    )
    return PaginatedResponse[SessionResponse](
        items=[SessionResponse.model_validate(s, from_attributes=True) for s in result.items],
        pagination=PageMeta(
            page=result.page,
            limit=result.page_size,
            total=result.total,
            pages=result.pages,
        ),
    )


@router.patch("/{session_id}/assign", response_model=SessionResponse)
async def assign_session(
    session_id: str,
    admin: CurrentAdmin,
    relay: RelayDep,
    uow: UoWDep,
    body: AssignSessionRequest | None = None,
) -> SessionResponse:
    admin_id = body.admin_id if body and body.admin_id is not None else admin.subject_id
    session = await session_service.assign_admin(session_id, admin_id, admin, relay, uow)
    return SessionResponse.model_validate(session, from_attributes=True)
