"""In-process registry of live WebSocket connections, one per identity."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket

from support_chat.infrastructure.ws.protocol import encode_frame

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Maps an identity key (``user:42``) to its current connection.

    A newer registration for the same identity replaces the older one.
    Unregistering a socket only drops the entries that still point at it,
    so a stale close never evicts a reconnected client.
    """

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, identity: str) -> bool:
        return identity in self._connections

    def lookup(self, identity: str) -> WebSocket | None:
        return self._connections.get(identity)

    def register(self, identity: str, ws: WebSocket) -> None:
        for key in self._keys_for(ws):
            if key != identity:
                del self._connections[key]
        previous = self._connections.get(identity)
        self._connections[identity] = ws
        if previous is not None and previous is not ws:
            logger.info("WS identity %s re-registered, previous connection replaced", identity)
        logger.debug("WS registered: %s (total=%d)", identity, len(self._connections))

    def unregister(self, ws: WebSocket) -> list[str]:
        removed = self._keys_for(ws)
        for key in removed:
            del self._connections[key]
        if removed:
            logger.debug("WS unregistered: %s", ", ".join(removed))
        return removed

    async def push(
        self,
        identity: str,
        event_type: str,
        data: dict[str, Any],
    ) -> bool:
        """Send one event to ``identity``. Never raises; False on miss or send failure."""
        ws = self._connections.get(identity)
        if ws is None:
            return False
        try:
            await ws.send_text(encode_frame(event_type, data))
        except Exception:
            # entry stays until the socket's own disconnect handler runs
            logger.warning("WS push %s to %s failed", event_type, identity, exc_info=True)
            return False
        return True

    async def close_all(self, code: int = 1001) -> None:
        sockets = {id(ws): ws for ws in self._connections.values()}
        self._connections.clear()
        for ws in sockets.values():
            try:
                await ws.close(code=code)
            except Exception:
                logger.debug("WS close on shutdown failed", exc_info=True)

    def _keys_for(self, ws: WebSocket) -> list[str]:
        return [key for key, conn in self._connections.items() if conn is ws]
