from __future__ import annotations

import logging
import uuid

from telemed_realtime.application.dto.message import SendMessageDTO
from telemed_realtime.application.dto.principal import Principal
from telemed_realtime.application.exceptions import AppError, ForbiddenError, NotFoundError
from telemed_realtime.application.ports.notifications import NotificationSink
from telemed_realtime.application.uow import UnitOfWorkFactory
from telemed_realtime.domain.entities.conversation import message_preview
from telemed_realtime.domain.entities.message import Attachment, Message
from telemed_realtime.domain.value_objects.enums import NotificationType
from telemed_realtime.realtime import events
from telemed_realtime.realtime.connection import Connection, deliver
from telemed_realtime.realtime.protocol import SendMessageData
from telemed_realtime.realtime.rooms import RoomRegistry, conversation_room
from telemed_realtime.realtime.session_directory import SessionDirectory
from telemed_realtime.services import conversation_service, message_service, read_state_service
from telemed_realtime.services.notification_service import build_notification

logger = logging.getLogger(__name__)

SEND_FAILED = "Failed to send message"


class MessageRouter:
    """Persists chat messages and fans them out to interested connections."""

    def __init__(
        self,
        sessions: SessionDirectory,
        rooms: RoomRegistry,
        notifications: NotificationSink,
        uow_factory: UnitOfWorkFactory,
    ) -> None:
        self._sessions = sessions
        self._rooms = rooms
        self._notifications = notifications
        self._uow_factory = uow_factory

    async def join_conversation(
        self,
        connection: Connection,
        principal: Principal,
        conversation_id: str,
    ) -> bool:
        """Join the conversation room; non-participants are ignored without a reply."""
        try:
            cid = uuid.UUID(conversation_id)
        except ValueError:
            return False

        async with self._uow_factory() as uow:
            try:
                await conversation_service.get_conversation(cid, principal, uow)
            except (NotFoundError, ForbiddenError):
                logger.debug("Ignoring join of %s by %s", cid, principal.user_id)
                return False

        self._rooms.join(conversation_room(cid), connection)
        return True

    async def send_message(
        self,
        connection: Connection,
        principal: Principal,
        data: SendMessageData,
    ) -> Message | None:
        attachment = None
        if data.file_url or data.file_name or data.file_size:
            attachment = Attachment(url=data.file_url, name=data.file_name, size=data.file_size)
        dto = SendMessageDTO(
            recipient_id=data.recipient_id,
            content=data.content,
            type=data.message_type,
            attachment=attachment,
        )

        try:
            async with self._uow_factory() as uow:
                msg, conversation = await message_service.send_message(principal, dto, uow)
        except AppError as exc:
            logger.info("Rejected message from %s: %s", principal.user_id, exc.detail)
            await deliver(connection, events.ERROR, events.error_payload(SEND_FAILED))
            return None
        except Exception:
            logger.exception("Error sending message from %s to %s", principal.user_id, data.recipient_id)
            await deliver(connection, events.ERROR, events.error_payload(SEND_FAILED))
            return None

        # Room members and the recipient's personal channel may overlap; clients dedupe by id.
        record = events.message_record(msg, principal.profile)
        await self._rooms.broadcast(conversation_room(conversation.id), events.NEW_MESSAGE, record)
        await self._sessions.send_to_user(msg.recipient_id, events.NEW_MESSAGE, record)

        try:
            await self._notify_recipient(principal, msg)
        except Exception:
            logger.exception("Notification side effects failed for message %s", msg.id)

        logger.debug("Message %s delivered %s -> %s", msg.id, msg.sender_id, msg.recipient_id)
        return msg

    async def _notify_recipient(self, principal: Principal, msg: Message) -> None:
        notification = build_notification(
            NotificationType.NEW_MESSAGE,
            recipient_id=msg.recipient_id,
            sender_id=msg.sender_id,
            data={
                "conversationId": str(msg.conversation_id),
                "messageId": str(msg.id),
            },
            sender_name=principal.display_name,
        )
        self._notifications.dispatch(notification)

        if self._sessions.is_online(msg.recipient_id):
            await self._sessions.send_to_user(
                msg.recipient_id,
                events.NEW_NOTIFICATION,
                {
                    "type": notification.type,
                    "title": notification.title,
                    "message": notification.message,
                    "conversationId": str(msg.conversation_id),
                    "sender": principal.display_name,
                    "content": message_preview(msg.type, msg.content),
                },
            )

    async def mark_read(self, principal: Principal, conversation_id: str) -> bool:
        try:
            cid = uuid.UUID(conversation_id)
        except ValueError:
            return False

        async with self._uow_factory() as uow:
            try:
                await read_state_service.mark_read(cid, principal, uow)
            except (NotFoundError, ForbiddenError):
                logger.debug("Ignoring mark-read of %s by %s", cid, principal.user_id)
                return False
        return True
