from __future__ import annotations

from typing import Protocol

from support_chat.application.dto.principal import Principal


class TokenVerifier(Protocol):
    """Turns a bearer token into a caller. Any exception means the token is rejected."""

    async def verify(self, token: str) -> Principal: ...
