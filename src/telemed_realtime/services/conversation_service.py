from __future__ import annotations

import uuid
from datetime import datetime, timezone

from telemed_realtime.application.dto.principal import Principal
from telemed_realtime.application.exceptions import ValidationError
from telemed_realtime.application.policies.permissions import assert_conversation_access
from telemed_realtime.application.uow import UnitOfWork
from telemed_realtime.domain.entities.conversation import Conversation, canonical_pair


async def find_or_create_conversation(
    user_a: str,
    user_b: str,
    uow: UnitOfWork,
) -> Conversation:
    """Return the conversation for the unordered pair, creating it on first use.

    Does not commit; the caller owns the transaction. Pair uniqueness under
    concurrent creation is enforced by the store, see ConversationWriter.
    """
    if user_a == user_b:
        raise ValidationError("A conversation needs two distinct participants")

    existing = await uow.conversations.get_by_participants(user_a, user_b)
    if existing is not None:
        return existing

    now = datetime.now(timezone.utc)
    pair = canonical_pair(user_a, user_b)
    conversation = Conversation(
        id=uuid.uuid4(),
        participant_ids=pair,
        last_message=None,
        unread_counts={pair[0]: 0, pair[1]: 0},
        created_at=now,
        updated_at=now,
    )
    return await uow.conversations_w.create_if_not_exists(conversation)


async def get_conversation(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Conversation:
    conversation = await uow.conversations.get_by_id(conversation_id)
    return assert_conversation_access(principal, conversation)
