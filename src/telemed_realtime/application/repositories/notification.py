from __future__ import annotations

from typing import Protocol

from telemed_realtime.domain.entities.notification import Notification


class NotificationWriter(Protocol):
    async def add(self, notification: Notification) -> None: ...
