from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from telemed_realtime.domain.entities.conversation import Conversation
from telemed_realtime.domain.entities.message import Message


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_by_participants(
        self, user_a: str, user_b: str,
    ) -> Conversation | None:
        """Find the conversation for an unordered participant pair."""
        ...


class ConversationWriter(Protocol):
    """Counter updates are applied to the stored row, never to a caller's snapshot."""

    async def create_if_not_exists(self, conversation: Conversation) -> Conversation:
        """Insert conversation unless one exists for the same pair; return the stored one."""
        ...

    async def record_message(self, conversation_id: UUID, message: Message) -> Conversation:
        """Replace the last-message summary and add one to the recipient's unread counter."""
        ...

    async def reset_unread(self, conversation_id: UUID, user_id: str, at: datetime) -> Conversation:
        """Set user_id's unread counter to zero, leaving the other participant's untouched."""
        ...
