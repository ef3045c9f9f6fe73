from __future__ import annotations

import jwt

from support_chat.application.dto.principal import Principal
from support_chat.infrastructure.auth.claims import principal_from_claims


class HS256Verifier:
    """Shared-secret verifier for tokens minted by the storefront backend."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        *,
        audience: str | None = None,
        leeway: int = 0,
    ) -> None:
        if not secret:
            raise ValueError("JWT_SECRET is empty")
        self._secret = secret
        self._algorithm = algorithm
        self._audience = audience
        self._leeway = leeway

    async def verify(self, token: str) -> Principal:
        payload = jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            audience=self._audience,
            leeway=self._leeway,
            options={"verify_aud": self._audience is not None},
        )
        return principal_from_claims(payload)
