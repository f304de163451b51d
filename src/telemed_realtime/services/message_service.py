from __future__ import annotations

import uuid
from datetime import datetime, timezone

from telemed_realtime.application.dto.message import SendMessageDTO
from telemed_realtime.application.dto.principal import Principal
from telemed_realtime.application.exceptions import ValidationError
from telemed_realtime.application.uow import UnitOfWork
from telemed_realtime.domain.entities.conversation import Conversation
from telemed_realtime.domain.entities.message import Message
from telemed_realtime.domain.value_objects.enums import MessageType
from telemed_realtime.services.conversation_service import find_or_create_conversation


async def send_message(
    principal: Principal,
    dto: SendMessageDTO,
    uow: UnitOfWork,
) -> tuple[Message, Conversation]:
    """Persist a message and fold it into its conversation in one transaction.

    Sender, recipient and timestamp are stamped here. The recipient's unread
    counter grows by one; the sender's is left alone.
    """
    if dto.type == MessageType.TEXT and not dto.content.strip():
        raise ValidationError("Message content is required")

    conversation = await find_or_create_conversation(
        principal.user_id, dto.recipient_id, uow,
    )

    msg = Message(
        id=uuid.uuid4(),
        conversation_id=conversation.id,
        sender_id=principal.user_id,
        recipient_id=dto.recipient_id,
        content=dto.content,
        type=dto.type.value,
        attachment=dto.attachment,
        is_read=False,
        created_at=datetime.now(timezone.utc),
    )
    msg = await uow.messages_w.create(msg)

    conversation = await uow.conversations_w.record_message(conversation.id, msg)
    await uow.commit()

    return msg, conversation
