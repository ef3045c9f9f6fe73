"""Cross-instance fan-out of relay envelopes over Redis Pub/Sub.

Every instance publishes to and listens on the same channel; each one hands
envelopes to its own connection registry. Delivery is at-most-once.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError

from support_chat.application.dto.relay import RelayEnvelope
from support_chat.infrastructure.bus.serializer import decode_envelope, encode_envelope

logger = logging.getLogger(__name__)

OnEnvelope = Callable[[RelayEnvelope], Awaitable[None]]


class RedisPubSubPublisher:
    """Implements application.ports.bus.EnvelopePublisher."""

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def publish(self, envelope: RelayEnvelope) -> None:
        await self._redis.publish(self._channel, encode_envelope(envelope))


class RedisPubSubSubscriber:
    """Background task feeding channel envelopes to ``callback``.

    Reconnects after ``reconnect_delay`` seconds when Redis drops the
    subscription; anything published in the gap is lost.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnEnvelope,
        *,
        reconnect_delay: float = 2.0,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._reconnect_delay = reconnect_delay
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name="relay-subscriber")
        logger.info("Relay subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Relay subscriber stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self._listen()
            except RedisConnectionError:
                logger.warning(
                    "Relay subscription lost, retrying in %.1fs",
                    self._reconnect_delay,
                    exc_info=True,
                )
                await asyncio.sleep(self._reconnect_delay)

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                await self._dispatch(message["data"])
        finally:
            await pubsub.aclose()

    async def _dispatch(self, raw: str | bytes) -> None:
        try:
            envelope = decode_envelope(raw)
        except ValueError:
            logger.warning("Dropping malformed relay envelope", exc_info=True)
            return
        try:
            await self._callback(envelope)
        except Exception:
            logger.exception("Relay dispatch of %s to %s failed", envelope.event_type, envelope.recipient)
