from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from telemed_realtime.realtime.connection import Connection, deliver

logger = logging.getLogger(__name__)


def conversation_room(conversation_id: UUID | str) -> str:
    return f"conversation-{conversation_id}"


def appointment_room(appointment_id: str) -> str:
    return f"appointment-{appointment_id}"


class RoomRegistry:
    """Explicit room id -> member connections mapping used for fan-out."""

    def __init__(self) -> None:
        self._rooms: dict[str, set[Connection]] = {}
        self._memberships: dict[Connection, set[str]] = {}

    def join(self, room: str, connection: Connection) -> None:
        self._rooms.setdefault(room, set()).add(connection)
        self._memberships.setdefault(connection, set()).add(room)
        logger.debug("Connection %s joined %s", connection.id, room)

    def leave(self, room: str, connection: Connection) -> None:
        members = self._rooms.get(room)
        if members is not None:
            members.discard(connection)
            if not members:
                del self._rooms[room]
        rooms = self._memberships.get(connection)
        if rooms is not None:
            rooms.discard(room)
            if not rooms:
                del self._memberships[connection]

    def leave_all(self, connection: Connection) -> list[str]:
        rooms = sorted(self._memberships.get(connection, ()))
        for room in rooms:
            self.leave(room, connection)
        return rooms

    def members(self, room: str) -> frozenset[Connection]:
        return frozenset(self._rooms.get(room, ()))

    def rooms_of(self, connection: Connection) -> frozenset[str]:
        return frozenset(self._memberships.get(connection, ()))

    async def broadcast(
        self,
        room: str,
        event: str,
        data: dict[str, Any],
        *,
        exclude: Connection | None = None,
    ) -> int:
        delivered = 0
        for conn in self.members(room):
            if conn is exclude:
                continue
            if await deliver(conn, event, data):
                delivered += 1
        return delivered
