from __future__ import annotations

from telemed_realtime.domain.entities.conversation import Conversation, LastMessage
from telemed_realtime.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    last_message = None
    if model.last_message_at is not None:
        last_message = LastMessage(
            content=model.last_message_content or "",
            sender_id=model.last_message_sender_id or "",
            timestamp=model.last_message_at,
            type=model.last_message_type or "text",
        )
    return Conversation(
        id=model.id,
        participant_ids=(model.participant_a, model.participant_b),
        last_message=last_message,
        unread_counts={k: int(v) for k, v in (model.unread_counts or {}).items()},
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def summary_values(entity: Conversation) -> dict[str, object]:
    """Column values for the mutable part of a conversation."""
    last = entity.last_message
    return {
        "last_message_content": last.content if last else None,
        "last_message_sender_id": last.sender_id if last else None,
        "last_message_at": last.timestamp if last else None,
        "last_message_type": last.type if last else None,
        "unread_counts": dict(entity.unread_counts),
    }


def entity_to_model(entity: Conversation) -> ConversationModel:
    a, b = entity.participant_ids
    return ConversationModel(
        id=entity.id,
        participant_a=a,
        participant_b=b,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
        **summary_values(entity),
    )
