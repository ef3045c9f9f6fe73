"""JSON wire format for relay envelopes on the pub/sub channel."""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from support_chat.application.dto.relay import RelayEnvelope


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def encode_envelope(envelope: RelayEnvelope) -> str:
    return json.dumps(
        {"event": envelope.event_type, "to": envelope.recipient, "data": envelope.data},
        cls=_Encoder,
    )


def decode_envelope(raw: str | bytes) -> RelayEnvelope:
    """Raises ValueError on anything that is not a well-formed envelope."""
    try:
        body = json.loads(raw)
        event_type, recipient = body["event"], body["to"]
    except (json.JSONDecodeError, KeyError, TypeError) as exc:
        raise ValueError(f"Malformed relay envelope: {exc}") from exc
    if not isinstance(recipient, str) or not recipient:
        raise ValueError("Relay envelope has no recipient")
    return RelayEnvelope(event_type=event_type, recipient=recipient, data=body.get("data") or {})
