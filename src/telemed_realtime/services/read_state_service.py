from __future__ import annotations

import uuid
from datetime import datetime, timezone

from telemed_realtime.application.dto.principal import Principal
from telemed_realtime.application.policies.permissions import assert_conversation_access
from telemed_realtime.application.uow import UnitOfWork
from telemed_realtime.domain.entities.conversation import Conversation


async def mark_read(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Conversation:
    """Reset the reader's unread counter and flag their incoming messages read."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    conversation = assert_conversation_access(principal, conversation)

    await uow.messages_w.mark_read(conversation_id, principal.user_id)
    updated = await uow.conversations_w.reset_unread(
        conversation.id, principal.user_id, datetime.now(timezone.utc),
    )
    await uow.commit()
    return updated
