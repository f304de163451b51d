from __future__ import annotations

from typing import Any

import jwt

from telemed_realtime.application.dto.principal import TokenClaims


def claims_from_payload(payload: dict[str, Any]) -> TokenClaims:
    """Map a decoded JWT payload onto TokenClaims.

    Tokens minted by the platform's auth service carry ``userId``; standard
    issuers use ``sub``.
    """
    subject = payload.get("sub") or payload.get("userId")
    if not subject:
        raise jwt.InvalidTokenError("Token has no subject")
    role = payload.get("role")
    return TokenClaims(user_id=str(subject), role=str(role) if role else None)
