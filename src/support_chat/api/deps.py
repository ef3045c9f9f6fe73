"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from support_chat.application.dto.principal import Principal
from support_chat.application.ports.auth import TokenVerifier
from support_chat.application.ports.relay import MessageRelay
from support_chat.config import settings
from support_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from support_chat.infrastructure.auth.jwks_verifier import JWKSVerifier
from support_chat.infrastructure.db.session import AsyncSessionLocal
from support_chat.infrastructure.db.uow import SqlAlchemyUoW

_bearer_scheme = HTTPBearer()


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    """One session per request; uncommitted work is rolled back on error."""
    async with AsyncSessionLocal() as session, SqlAlchemyUoW(session) as uow:
        yield uow


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


def _build_verifier() -> TokenVerifier:
    common = {"audience": settings.JWT_AUDIENCE, "leeway": settings.JWT_LEEWAY_SECONDS}
    if settings.JWT_VERIFY_MODE == "jwks":
        if not settings.JWKS_URL:
            raise RuntimeError("JWKS_URL must be set when JWT_VERIFY_MODE=jwks")
        return JWKSVerifier(settings.JWKS_URL, **common)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM, **common)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _build_verifier()
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
) -> Principal:
    verifier = get_verifier()
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def get_current_admin(principal: CurrentPrincipal) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return principal


CurrentAdmin = Annotated[Principal, Depends(get_current_admin)]


def get_relay(request: Request) -> MessageRelay:
    return request.app.state.relay


RelayDep = Annotated[MessageRelay, Depends(get_relay)]
