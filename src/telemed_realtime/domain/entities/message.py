from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Attachment:
    url: str
    name: str
    size: int


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    sender_id: str
    recipient_id: str
    content: str
    type: str
    attachment: Attachment | None
    is_read: bool
    created_at: datetime
