from __future__ import annotations

import asyncio

import jwt
from jwt import PyJWKClient

from support_chat.application.dto.principal import Principal
from support_chat.infrastructure.auth.claims import principal_from_claims

_ASYMMETRIC = ["RS256", "ES256"]


class JWKSVerifier:
    """Verify tokens against keys published by an identity provider."""

    def __init__(
        self,
        jwks_url: str,
        *,
        audience: str | None = None,
        leeway: int = 0,
    ) -> None:
        self._client = PyJWKClient(jwks_url, cache_keys=True)
        self._audience = audience
        self._leeway = leeway

    async def verify(self, token: str) -> Principal:
        # PyJWKClient fetches keys over blocking HTTP on cache miss
        key = await asyncio.to_thread(self._client.get_signing_key_from_jwt, token)
        payload = jwt.decode(
            token,
            key.key,
            algorithms=_ASYMMETRIC,
            audience=self._audience,
            leeway=self._leeway,
            options={"verify_aud": self._audience is not None},
        )
        return principal_from_claims(payload)
