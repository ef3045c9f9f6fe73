from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class RelayEnvelope:
    """One push addressed to a single identity key, as carried between instances."""

    event_type: str
    recipient: str
    data: dict[str, Any] = field(default_factory=dict)
