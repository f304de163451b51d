from __future__ import annotations

from typing import Protocol
from uuid import UUID

from telemed_realtime.domain.entities.message import Message


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...

    async def mark_read(self, conversation_id: UUID, recipient_id: str) -> int:
        """Flag unread messages addressed to recipient_id. Return the number updated."""
        ...
