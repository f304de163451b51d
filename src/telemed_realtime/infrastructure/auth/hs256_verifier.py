from __future__ import annotations

import jwt

from telemed_realtime.application.dto.principal import TokenClaims
from telemed_realtime.infrastructure.auth.claims import claims_from_payload


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> TokenClaims:
        payload = jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            options={"require": ["exp"]},
        )
        return claims_from_payload(payload)
