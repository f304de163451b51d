from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import Integer, Text, func, literal, select, update
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from telemed_realtime.domain.entities.conversation import Conversation, canonical_pair, message_preview
from telemed_realtime.domain.entities.message import Message
from telemed_realtime.infrastructure.db.mappers import conversation as mapper
from telemed_realtime.infrastructure.db.models.conversation import ConversationModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(ConversationModel, conversation_id)
        return mapper.model_to_entity(result) if result else None

    async def get_by_participants(self, user_a: str, user_b: str) -> Conversation | None:
        a, b = canonical_pair(user_a, user_b)
        stmt = select(ConversationModel).where(
            ConversationModel.participant_a == a,
            ConversationModel.participant_b == b,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_if_not_exists(self, conversation: Conversation) -> Conversation:
        """Insert the pair atomically; a concurrent creator's row wins on conflict."""
        model = mapper.entity_to_model(conversation)
        values = {
            "id": model.id,
            "participant_a": model.participant_a,
            "participant_b": model.participant_b,
            "unread_counts": model.unread_counts,
            "created_at": model.created_at,
            "updated_at": model.updated_at,
        }
        stmt = (
            pg_insert(ConversationModel)
            .values(**values)
            .on_conflict_do_nothing(constraint="uq_conversation_pair")
            .returning(ConversationModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is not None:
            return mapper.model_to_entity(row)

        existing = await ConversationReaderRepo(self._session).get_by_participants(
            model.participant_a, model.participant_b,
        )
        assert existing is not None
        return existing

    async def record_message(self, conversation_id: UUID, message: Message) -> Conversation:
        """One UPDATE; the recipient's counter is incremented on the stored row."""
        counts = ConversationModel.unread_counts
        bumped = func.coalesce(counts[message.recipient_id].astext.cast(Integer), 0) + 1
        return await self._update(
            conversation_id,
            last_message_content=message_preview(message.type, message.content),
            last_message_sender_id=message.sender_id,
            last_message_at=message.created_at,
            last_message_type=message.type,
            unread_counts=func.jsonb_set(
                counts, _key_path(message.recipient_id), func.to_jsonb(bumped), type_=JSONB,
            ),
            updated_at=message.created_at,
        )

    async def reset_unread(self, conversation_id: UUID, user_id: str, at: datetime) -> Conversation:
        counts = ConversationModel.unread_counts
        return await self._update(
            conversation_id,
            unread_counts=func.jsonb_set(
                counts, _key_path(user_id), func.to_jsonb(literal(0, Integer)), type_=JSONB,
            ),
            updated_at=at,
        )

    async def _update(self, conversation_id: UUID, **values: Any) -> Conversation:
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(**values)
            .returning(ConversationModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return mapper.model_to_entity(result.scalar_one())


def _key_path(user_id: str) -> Any:
    return literal([user_id], ARRAY(Text))
