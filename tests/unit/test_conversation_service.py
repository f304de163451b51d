from __future__ import annotations

import uuid

import pytest

from telemed_realtime.application.exceptions import ForbiddenError, NotFoundError, ValidationError
from telemed_realtime.services import conversation_service
from tests.conftest import FakeUoW, make_conversation


@pytest.mark.asyncio
async def test_find_or_create_creates_new():
    uow = FakeUoW()

    conv = await conversation_service.find_or_create_conversation("pat1", "doc1", uow)

    assert conv.participant_ids == ("doc1", "pat1")
    assert conv.unread_counts == {"doc1": 0, "pat1": 0}
    assert conv.last_message is None
    assert len(uow.conversations._store) == 1


@pytest.mark.asyncio
async def test_find_or_create_is_symmetric_and_idempotent():
    uow = FakeUoW()

    first = await conversation_service.find_or_create_conversation("doc1", "pat1", uow)
    second = await conversation_service.find_or_create_conversation("pat1", "doc1", uow)
    third = await conversation_service.find_or_create_conversation("doc1", "pat1", uow)

    assert first.id == second.id == third.id
    assert len(uow.conversations._store) == 1


@pytest.mark.asyncio
async def test_find_or_create_returns_existing():
    uow = FakeUoW()
    existing = make_conversation("doc1", "pat1")
    uow.conversations._store[existing.id] = existing

    conv = await conversation_service.find_or_create_conversation("pat1", "doc1", uow)

    assert conv.id == existing.id


@pytest.mark.asyncio
async def test_conversation_with_self_is_rejected():
    with pytest.raises(ValidationError):
        await conversation_service.find_or_create_conversation("pat1", "pat1", FakeUoW())


@pytest.mark.asyncio
async def test_get_conversation_checks_membership(patient, other_patient):
    uow = FakeUoW()
    conv = make_conversation("doc1", "pat1")
    uow.conversations._store[conv.id] = conv

    assert (await conversation_service.get_conversation(conv.id, patient, uow)).id == conv.id
    with pytest.raises(ForbiddenError):
        await conversation_service.get_conversation(conv.id, other_patient, uow)
    with pytest.raises(NotFoundError):
        await conversation_service.get_conversation(uuid.uuid4(), patient, uow)
