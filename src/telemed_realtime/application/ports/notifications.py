from __future__ import annotations

import asyncio
from typing import Protocol

from telemed_realtime.domain.entities.notification import Notification


class NotificationSink(Protocol):
    """Accepts notifications without making the caller wait for persistence."""

    def dispatch(self, notification: Notification) -> asyncio.Task[None]: ...
