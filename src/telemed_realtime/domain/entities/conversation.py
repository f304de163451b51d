from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from uuid import UUID

from telemed_realtime.domain.entities.message import Message
from telemed_realtime.domain.value_objects.enums import MessageType


def canonical_pair(user_a: str, user_b: str) -> tuple[str, str]:
    """Order a participant pair so that (a, b) and (b, a) map to the same key."""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


def message_preview(msg_type: str, content: str) -> str:
    if msg_type == MessageType.TEXT:
        return content
    return f"Sent a {msg_type}"


@dataclass(frozen=True, slots=True)
class LastMessage:
    content: str
    sender_id: str
    timestamp: datetime
    type: str


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    participant_ids: tuple[str, str]
    last_message: LastMessage | None
    unread_counts: dict[str, int] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participant_ids

    def unread_for(self, user_id: str) -> int:
        return self.unread_counts.get(user_id, 0)

    def with_message(self, message: Message) -> Conversation:
        """Return a copy summarising ``message`` with the recipient's counter bumped."""
        counts = dict(self.unread_counts)
        counts[message.recipient_id] = counts.get(message.recipient_id, 0) + 1
        return replace(
            self,
            last_message=LastMessage(
                content=message_preview(message.type, message.content),
                sender_id=message.sender_id,
                timestamp=message.created_at,
                type=message.type,
            ),
            unread_counts=counts,
            updated_at=message.created_at,
        )

    def with_read_by(self, user_id: str, at: datetime) -> Conversation:
        counts = dict(self.unread_counts)
        counts[user_id] = 0
        return replace(self, unread_counts=counts, updated_at=at)
