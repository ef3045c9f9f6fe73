from __future__ import annotations

from typing import Protocol

from support_chat.application.dto.relay import RelayEnvelope


class EnvelopePublisher(Protocol):
    """Broadcasts an envelope to every running instance."""

    async def publish(self, envelope: RelayEnvelope) -> None: ...
