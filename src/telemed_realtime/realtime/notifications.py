"""Fire-and-forget notification persistence with its own retry policy."""
from __future__ import annotations

import asyncio
import logging

from telemed_realtime.application.uow import UnitOfWorkFactory
from telemed_realtime.domain.entities.notification import Notification

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Implements application.ports.notifications.NotificationSink.

    Each notification is written by its own background task through a fresh
    unit of work, after the transaction that triggered it has committed.
    Failures are retried with exponential backoff and never reach the caller.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        max_attempts: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 30.0,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max(1, max_attempts)
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, notification: Notification) -> asyncio.Task[None]:
        task = asyncio.create_task(
            self._deliver(notification), name=f"notification-{notification.id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def backoff(self, attempt: int) -> float:
        return min(self._base_delay * (2 ** attempt), self._max_delay)

    async def _deliver(self, notification: Notification) -> None:
        for attempt in range(self._max_attempts):
            try:
                async with self._uow_factory() as uow:
                    await uow.notifications.add(notification)
                    await uow.commit()
                logger.debug(
                    "Notification %s (%s) stored for %s",
                    notification.id, notification.type, notification.recipient_id,
                )
                return
            except Exception:
                logger.warning(
                    "Notification %s attempt %d/%d failed",
                    notification.id, attempt + 1, self._max_attempts,
                    exc_info=True,
                )
                if attempt + 1 < self._max_attempts:
                    await asyncio.sleep(self.backoff(attempt))
        logger.error(
            "Dropping notification %s for %s after %d attempts",
            notification.id, notification.recipient_id, self._max_attempts,
        )

    async def drain(self) -> None:
        """Wait for every in-flight notification task."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
