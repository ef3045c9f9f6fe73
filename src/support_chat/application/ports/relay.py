from __future__ import annotations

from typing import Any, Protocol


class MessageRelay(Protocol):
    """Best-effort push to whichever connection is registered for ``recipient``."""

    async def deliver(
        self,
        recipient: str,
        event_type: str,
        data: dict[str, Any],
    ) -> bool:
        """Return True if the event was handed to a live connection (or the bus)."""
        ...
