from __future__ import annotations

import logging

from telemed_realtime.application.dto.principal import Principal
from telemed_realtime.application.exceptions import AuthenticationError
from telemed_realtime.application.ports.auth import TokenVerifier
from telemed_realtime.application.uow import UnitOfWorkFactory

logger = logging.getLogger(__name__)

AUTH_FAILED = "Authentication error"


class ConnectionGatekeeper:
    """Admits a connection only for a valid token naming an existing user.

    Every rejection carries the same generic detail so callers cannot tell a
    bad signature from an expired token or a deleted user.
    """

    def __init__(self, verifier: TokenVerifier, uow_factory: UnitOfWorkFactory) -> None:
        self._verifier = verifier
        self._uow_factory = uow_factory

    async def admit(self, token: str | None) -> Principal:
        if not token:
            raise AuthenticationError(AUTH_FAILED)

        try:
            claims = await self._verifier.verify(token)
        except Exception as exc:
            logger.debug("WS auth failed", exc_info=True)
            raise AuthenticationError(AUTH_FAILED) from exc

        async with self._uow_factory() as uow:
            profile = await uow.users.get_profile(claims.user_id)
        if profile is None:
            logger.info("WS auth for unknown user %s", claims.user_id)
            raise AuthenticationError(AUTH_FAILED)

        return Principal(user_id=claims.user_id, profile=profile)
