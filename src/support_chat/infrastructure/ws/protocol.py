"""WebSocket frames for ``/ws/chat``.

Every frame in either direction is ``{"type": ..., "data": {...}}``.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel

# client -> server
PING = "ping"
AUTH = "auth"
USER_LOGIN = "user_login"
MESSAGE_SEND = "message.send"
SEND_MESSAGE = "send_message"  # older web client
MARK_READ = "mark_read"

# server -> client, besides the relayed message.created / session.updated
PONG = "pong"
AUTHENTICATED = "authenticated"
MESSAGE_SENT = "message.sent"
MESSAGE_ERROR = "message.error"
ERROR = "error"


class WsInbound(BaseModel):
    type: str
    data: dict[str, Any] = {}

    def session_id(self) -> str | None:
        """Accepts both ``session_id`` and the older ``sessionId`` key."""
        value = self.data.get("session_id", self.data.get("sessionId"))
        return value if isinstance(value, str) else None


class WsOutbound(BaseModel):
    type: str
    data: dict[str, Any] = {}


def encode_frame(event_type: str, data: dict[str, Any]) -> str:
    return WsOutbound(type=event_type, data=data).model_dump_json()
