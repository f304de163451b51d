"""Presence: which users are online and through which connections."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from telemed_realtime.domain.entities.user import UserProfile
from telemed_realtime.domain.value_objects.enums import PresenceStatus
from telemed_realtime.realtime import events
from telemed_realtime.realtime.connection import Connection, deliver

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionEntry:
    user_id: str
    profile: UserProfile
    connections: set[Connection] = field(default_factory=set)
    status: PresenceStatus = PresenceStatus.ONLINE


class SessionDirectory:
    """Tracks sessions per user. A user may hold several connections (tabs).

    The user is announced online when the first connection registers and
    offline when the last one goes away. Mutations never suspend; only the
    presence broadcasts await.
    """

    def __init__(self) -> None:
        self._entries: dict[str, SessionEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._entries

    def lookup(self, user_id: str) -> SessionEntry | None:
        return self._entries.get(user_id)

    def is_online(self, user_id: str) -> bool:
        return user_id in self._entries

    def has_connection(self, user_id: str, connection: Connection) -> bool:
        entry = self._entries.get(user_id)
        return entry is not None and connection in entry.connections

    def connections_of(self, user_id: str) -> list[Connection]:
        entry = self._entries.get(user_id)
        return list(entry.connections) if entry else []

    def all_connections(self) -> list[Connection]:
        return [conn for entry in self._entries.values() for conn in entry.connections]

    def attach(self, user_id: str, connection: Connection, profile: UserProfile) -> bool:
        """Add a connection for user_id. Returns True if the user just came online."""
        entry = self._entries.get(user_id)
        first = entry is None
        if entry is None:
            entry = SessionEntry(user_id=user_id, profile=profile)
            self._entries[user_id] = entry
        else:
            entry.profile = profile
        entry.connections.add(connection)
        logger.debug(
            "Session attached: %s via %s (connections=%d, online=%d)",
            user_id, connection.id, len(entry.connections), len(self._entries),
        )
        return first

    def detach(self, user_id: str, connection: Connection) -> SessionEntry | None:
        """Remove one connection. Returns the removed entry if the user went offline."""
        entry = self._entries.get(user_id)
        if entry is None or connection not in entry.connections:
            return None
        entry.connections.discard(connection)
        if entry.connections:
            logger.debug("Session detached: %s via %s, %d left", user_id, connection.id, len(entry.connections))
            return None
        del self._entries[user_id]
        entry.status = PresenceStatus.OFFLINE
        logger.debug("Session closed: %s (online=%d)", user_id, len(self._entries))
        return entry

    async def register(self, user_id: str, connection: Connection, profile: UserProfile) -> bool:
        came_online = self.attach(user_id, connection, profile)
        if came_online:
            await self.broadcast(
                events.USER_ONLINE,
                events.presence_payload(user_id, profile),
                exclude_user=user_id,
            )
        return came_online

    async def unregister(self, user_id: str, connection: Connection) -> bool:
        entry = self.detach(user_id, connection)
        if entry is None:
            return False
        await self.announce_offline(entry)
        return True

    async def announce_offline(self, entry: SessionEntry) -> None:
        await self.broadcast(
            events.USER_OFFLINE,
            events.presence_payload(entry.user_id, entry.profile),
            exclude_user=entry.user_id,
        )

    async def send_to_user(self, user_id: str, event: str, data: dict[str, Any]) -> int:
        """Personal channel: deliver to every connection of user_id."""
        delivered = 0
        for conn in self.connections_of(user_id):
            if await deliver(conn, event, data):
                delivered += 1
        return delivered

    async def broadcast(
        self,
        event: str,
        data: dict[str, Any],
        *,
        exclude_user: str | None = None,
    ) -> int:
        targets = [
            conn
            for uid, entry in list(self._entries.items())
            if uid != exclude_user
            for conn in entry.connections
        ]
        delivered = 0
        for conn in targets:
            if await deliver(conn, event, data):
                delivered += 1
        return delivered
