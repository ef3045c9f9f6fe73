from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from support_chat.api.deps import get_verifier
from support_chat.application.dto.principal import Principal
from support_chat.application.exceptions import AppError
from support_chat.application.ports.relay import MessageRelay
from support_chat.config import settings
from support_chat.domain.value_objects.enums import Role
from support_chat.infrastructure.db.session import AsyncSessionLocal
from support_chat.infrastructure.db.uow import SqlAlchemyUoW
from support_chat.infrastructure.ws import protocol as proto
from support_chat.infrastructure.ws.protocol import WsInbound, encode_frame
from support_chat.infrastructure.ws.registry import ConnectionRegistry
from support_chat.services import message_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CODE = 4001


@dataclass
class _ConnectionState:
    principal: Principal | None = None
    verified: bool = False


async def _authenticate(token: str) -> Principal | None:
    try:
        verifier = get_verifier()
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


def _announced_principal(data: dict[str, Any]) -> Principal | None:
    """Identity a client claims without a valid token (receive-only)."""
    raw_id = data.get("user_id", data.get("userId"))
    try:
        subject_id = int(raw_id)
    except (TypeError, ValueError):
        return None
    role_raw = data.get("role", "user")
    role = Role(role_raw) if role_raw in Role.__members__.values() else Role.USER
    return Principal(kind=role, subject_id=subject_id)


async def _send(ws: WebSocket, event_type: str, data: dict[str, Any]) -> None:
    await ws.send_text(encode_frame(event_type, data))


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str | None = Query(None),
) -> None:
    registry: ConnectionRegistry = websocket.app.state.connections
    relay: MessageRelay = websocket.app.state.relay
    state = _ConnectionState()

    if token:
        principal = await _authenticate(token)
        if principal is None and settings.WS_REQUIRE_TOKEN:
            await websocket.close(code=AUTH_FAILED_CODE, reason="Authentication failed")
            return
        await websocket.accept()
        if principal is not None:
            _bind(websocket, state, registry, principal, verified=True)
            await _send(websocket, proto.AUTHENTICATED, {"identity": principal.principal_key, "verified": True})
        else:
            logger.warning("WS connect token rejected, waiting for auth event")
    else:
        await websocket.accept()

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket), name=f"ws-heartbeat-{id(websocket)}",
    )
    try:
        await _read_loop(websocket, state, registry, relay)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", state.principal.principal_key if state.principal else "anonymous")
    finally:
        heartbeat_task.cancel()
        registry.unregister(websocket)


def _bind(
    ws: WebSocket,
    state: _ConnectionState,
    registry: ConnectionRegistry,
    principal: Principal,
    *,
    verified: bool,
) -> None:
    state.principal = principal
    state.verified = verified
    registry.register(principal.principal_key, ws)
    logger.info("WS %s bound (verified=%s)", principal.principal_key, verified)


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await _send(ws, proto.PONG, {})
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("WS heartbeat stopped", exc_info=True)


async def _read_loop(
    ws: WebSocket,
    state: _ConnectionState,
    registry: ConnectionRegistry,
    relay: MessageRelay,
) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except Exception:
            await _send(ws, proto.ERROR, {"code": "invalid_payload"})
            continue

        if msg.type == proto.PING:
            await _send(ws, proto.PONG, {})

        elif msg.type in (proto.AUTH, proto.USER_LOGIN):
            if not await _handle_auth(ws, state, registry, msg.data):
                return

        elif msg.type in (proto.MESSAGE_SEND, proto.SEND_MESSAGE):
            await _handle_send(ws, state, relay, msg)

        elif msg.type == proto.MARK_READ:
            await _handle_mark_read(ws, state, msg)

        else:
            await _send(ws, proto.ERROR, {"code": "unknown_type", "type": msg.type})


async def _handle_auth(
    ws: WebSocket,
    state: _ConnectionState,
    registry: ConnectionRegistry,
    data: dict[str, Any],
) -> bool:
    """Bind the announced identity. Returns False when the socket was closed."""
    token = data.get("token")
    principal = await _authenticate(token) if token else None
    if principal is not None:
        _bind(ws, state, registry, principal, verified=True)
        await _send(ws, proto.AUTHENTICATED, {"identity": principal.principal_key, "verified": True})
        return True

    if token:
        logger.warning("WS token rejected for announced user %s", data.get("user_id", data.get("userId")))
    if settings.WS_REQUIRE_TOKEN:
        await _send(ws, proto.ERROR, {"code": "auth_failed"})
        await ws.close(code=AUTH_FAILED_CODE, reason="Authentication failed")
        return False

    announced = _announced_principal(data)
    if announced is None:
        await _send(ws, proto.ERROR, {"code": "invalid_identity"})
        return True
    _bind(ws, state, registry, announced, verified=False)
    await _send(ws, proto.AUTHENTICATED, {"identity": announced.principal_key, "verified": False})
    return True


async def _handle_send(
    ws: WebSocket,
    state: _ConnectionState,
    relay: MessageRelay,
    msg: WsInbound,
) -> None:
    if state.principal is None or not state.verified:
        await _send(ws, proto.MESSAGE_ERROR, {"code": "unauthenticated"})
        return

    session_id = msg.session_id()
    if session_id is None:
        await _send(ws, proto.MESSAGE_ERROR, {"code": "invalid_data", "detail": "session_id is required"})
        return

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            created = await message_service.append_message(
                session_id, state.principal, msg.data.get("content"), relay, uow,
            )
        except AppError as exc:
            await _send(
                ws,
                proto.MESSAGE_ERROR,
                {"code": type(exc).__name__, "detail": exc.detail, "session_id": session_id},
            )
            return
        except Exception:
            logger.exception("WS send failed for %s", session_id)
            await _send(ws, proto.MESSAGE_ERROR, {"code": "send_failed", "session_id": session_id})
            return

    await _send(ws, proto.MESSAGE_SENT, {"session_id": session_id, "message_id": str(created.id)})


async def _handle_mark_read(
    ws: WebSocket,
    state: _ConnectionState,
    msg: WsInbound,
) -> None:
    if state.principal is None or not state.verified:
        await _send(ws, proto.ERROR, {"code": "unauthenticated"})
        return
    session_id = msg.session_id()
    if session_id is None:
        return

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            await message_service.mark_read(session_id, state.principal, uow)
        except AppError as exc:
            await _send(ws, proto.ERROR, {"code": type(exc).__name__, "detail": exc.detail})
        except Exception:
            logger.exception("mark_read failed")
