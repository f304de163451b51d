from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from telemed_realtime.domain.entities.notification import Notification
from telemed_realtime.infrastructure.db.models.notification import NotificationModel


class NotificationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, notification: Notification) -> None:
        self._session.add(
            NotificationModel(
                id=notification.id,
                recipient_id=notification.recipient_id,
                sender_id=notification.sender_id,
                type=notification.type,
                title=notification.title,
                message=notification.message,
                data=notification.data,
                created_at=notification.created_at,
            )
        )
        await self._session.flush()
