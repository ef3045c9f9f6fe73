"""MessageRelay implementations."""
from __future__ import annotations

from typing import Any

from support_chat.application.dto.relay import RelayEnvelope
from support_chat.application.ports.bus import EnvelopePublisher
from support_chat.infrastructure.bus.redis_pubsub import OnEnvelope
from support_chat.infrastructure.ws.registry import ConnectionRegistry


class LocalRelay:
    """Single-instance relay: push straight into this process's registry."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    async def deliver(
        self,
        recipient: str,
        event_type: str,
        data: dict[str, Any],
    ) -> bool:
        return await self._registry.push(recipient, event_type, data)


class PubSubRelay:
    """Multi-instance relay.

    The recipient may be connected to any instance, so the envelope is
    broadcast and the instance holding the connection delivers it.
    ``deliver`` therefore reports True once the broadcast succeeded.
    """

    def __init__(self, publisher: EnvelopePublisher) -> None:
        self._publisher = publisher

    async def deliver(
        self,
        recipient: str,
        event_type: str,
        data: dict[str, Any],
    ) -> bool:
        await self._publisher.publish(
            RelayEnvelope(event_type=event_type, recipient=recipient, data=data)
        )
        return True


def registry_dispatcher(registry: ConnectionRegistry) -> OnEnvelope:
    async def _dispatch(envelope: RelayEnvelope) -> None:
        await registry.push(envelope.recipient, envelope.event_type, envelope.data)

    return _dispatch
