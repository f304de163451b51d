from __future__ import annotations

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """One open duplex channel to a client. Hashable by identity."""

    id: str

    async def send(self, event: str, data: dict[str, Any]) -> None: ...


async def deliver(connection: Connection, event: str, data: dict[str, Any]) -> bool:
    """Send one event, reporting rather than raising transport failures.

    A broken socket is cleaned up by its own read loop when the transport
    reports the disconnect.
    """
    try:
        await connection.send(event, data)
    except Exception:
        logger.debug("Could not deliver %s to connection %s", event, connection.id, exc_info=True)
        return False
    return True
