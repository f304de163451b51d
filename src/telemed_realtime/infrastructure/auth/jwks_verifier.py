from __future__ import annotations

import asyncio

import jwt
from jwt import PyJWKClient

from telemed_realtime.application.dto.principal import TokenClaims
from telemed_realtime.infrastructure.auth.claims import claims_from_payload


class JWKSVerifier:
    """Verify JWTs using a remote JWKS endpoint."""

    def __init__(self, jwks_url: str) -> None:
        self._jwks_url = jwks_url
        self._jwk_client = PyJWKClient(jwks_url)

    async def verify(self, token: str) -> TokenClaims:
        # PyJWKClient fetches keys over blocking HTTP; keep it off the event loop.
        signing_key = await asyncio.to_thread(self._jwk_client.get_signing_key_from_jwt, token)
        payload = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256", "ES256"],
            options={"require": ["exp"]},
        )
        return claims_from_payload(payload)
