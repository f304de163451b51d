from __future__ import annotations

from telemed_realtime.domain.entities.message import Attachment, Message
from telemed_realtime.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    attachment = None
    if model.file_url or model.file_name or model.file_size:
        attachment = Attachment(
            url=model.file_url or "",
            name=model.file_name or "",
            size=model.file_size or 0,
        )
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        recipient_id=model.recipient_id,
        content=model.content,
        type=model.type,
        attachment=attachment,
        is_read=model.is_read,
        created_at=model.created_at,
    )


def entity_to_model(entity: Message) -> MessageModel:
    att = entity.attachment
    return MessageModel(
        id=entity.id,
        conversation_id=entity.conversation_id,
        sender_id=entity.sender_id,
        recipient_id=entity.recipient_id,
        content=entity.content,
        type=entity.type,
        file_url=att.url if att else None,
        file_name=att.name if att else None,
        file_size=att.size if att else None,
        is_read=entity.is_read,
        created_at=entity.created_at,
    )
