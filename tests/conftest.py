"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import TracebackType
from typing import Any
from uuid import UUID

import pytest
import pytest_asyncio

from telemed_realtime.application.dto.principal import Principal
from telemed_realtime.domain.entities.appointment import Appointment
from telemed_realtime.domain.entities.conversation import Conversation, canonical_pair
from telemed_realtime.domain.entities.message import Message
from telemed_realtime.domain.entities.notification import Notification
from telemed_realtime.domain.entities.user import UserProfile
from telemed_realtime.domain.value_objects.enums import UserRole
from telemed_realtime.realtime.hub import RealtimeHub
from telemed_realtime.realtime.notifications import NotificationDispatcher

DOCTOR = UserProfile(id="doc1", first_name="Gregory", last_name="House", role=UserRole.DOCTOR,
                     specialization="Diagnostics")
PATIENT = UserProfile(id="pat1", first_name="Jane", last_name="Doe", role=UserRole.PATIENT)
OTHER_PATIENT = UserProfile(id="pat2", first_name="John", last_name="Roe", role=UserRole.PATIENT)


@pytest.fixture
def doctor() -> Principal:
    return Principal(user_id=DOCTOR.id, profile=DOCTOR)


@pytest.fixture
def patient() -> Principal:
    return Principal(user_id=PATIENT.id, profile=PATIENT)


@pytest.fixture
def other_patient() -> Principal:
    return Principal(user_id=OTHER_PATIENT.id, profile=OTHER_PATIENT)


def make_conversation(user_a: str = "doc1", user_b: str = "pat1") -> Conversation:
    now = datetime.now(timezone.utc)
    pair = canonical_pair(user_a, user_b)
    return Conversation(
        id=uuid.uuid4(),
        participant_ids=pair,
        last_message=None,
        unread_counts={pair[0]: 0, pair[1]: 0},
        created_at=now,
        updated_at=now,
    )


@dataclass(eq=False)
class FakeConnection:
    """Records every outbound event; identity-hashed like a real socket."""

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    sent: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    broken: bool = False

    async def send(self, event: str, data: dict[str, Any]) -> None:
        if self.broken:
            raise ConnectionResetError("socket closed")
        self.sent.append((event, data))

    def names(self) -> list[str]:
        return [name for name, _ in self.sent]

    def payloads(self, event: str) -> list[dict[str, Any]]:
        return [data for name, data in self.sent if name == event]

    def clear(self) -> None:
        self.sent.clear()


@dataclass
class FakeUserReader:
    _profiles: dict[str, UserProfile] = field(default_factory=dict)

    async def get_profile(self, user_id: str) -> UserProfile | None:
        return self._profiles.get(user_id)


@dataclass
class FakeAppointmentReader:
    _store: dict[str, Appointment] = field(default_factory=dict)

    async def get_by_id(self, appointment_id: str) -> Appointment | None:
        return self._store.get(appointment_id)


@dataclass
class FakeConversationReader:
    _store: dict[UUID, Conversation] = field(default_factory=dict)

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.get(conversation_id)

    async def get_by_participants(self, user_a: str, user_b: str) -> Conversation | None:
        pair = canonical_pair(user_a, user_b)
        for c in self._store.values():
            if c.participant_ids == pair:
                return c
        return None



class SlowConversationReader(FakeConversationReader):
    """Yields to the event loop after each read, like a database round trip."""

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        found = await super().get_by_id(conversation_id)
        await asyncio.sleep(0)
        return found

    async def get_by_participants(self, user_a: str, user_b: str) -> Conversation | None:
        found = await super().get_by_participants(user_a, user_b)
        await asyncio.sleep(0)
        return found


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader
    fail_on_write: bool = False

    async def create_if_not_exists(self, conversation: Conversation) -> Conversation:
        existing = await self._reader.get_by_participants(*conversation.participant_ids)
        if existing is not None:
            return existing
        self._reader._store[conversation.id] = conversation
        return conversation

    async def record_message(self, conversation_id: UUID, message: Message) -> Conversation:
        if self.fail_on_write:
            raise RuntimeError("database unavailable")
        # Read and write the stored copy with no await in between, like a single UPDATE.
        updated = self._reader._store[conversation_id].with_message(message)
        self._reader._store[conversation_id] = updated
        return updated

    async def reset_unread(self, conversation_id: UUID, user_id: str, at: datetime) -> Conversation:
        if self.fail_on_write:
            raise RuntimeError("database unavailable")
        updated = self._reader._store[conversation_id].with_read_by(user_id, at)
        self._reader._store[conversation_id] = updated
        return updated


@dataclass
class FakeMessageWriter:
    _messages: list[Message] = field(default_factory=list)

    async def create(self, message: Message) -> Message:
        self._messages.append(message)
        return message

    async def mark_read(self, conversation_id: UUID, recipient_id: str) -> int:
        updated = 0
        for i, m in enumerate(self._messages):
            if m.conversation_id == conversation_id and m.recipient_id == recipient_id and not m.is_read:
                self._messages[i] = Message(
                    id=m.id,
                    conversation_id=m.conversation_id,
                    sender_id=m.sender_id,
                    recipient_id=m.recipient_id,
                    content=m.content,
                    type=m.type,
                    attachment=m.attachment,
                    is_read=True,
                    created_at=m.created_at,
                )
                updated += 1
        return updated


@dataclass
class FakeNotificationWriter:
    _records: list[Notification] = field(default_factory=list)
    failures_left: int = 0

    async def add(self, notification: Notification) -> None:
        if self.failures_left > 0:
            self.failures_left -= 1
            raise RuntimeError("notification store unavailable")
        self._records.append(notification)


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests. Usable directly as its own factory result."""

    users: FakeUserReader = field(default_factory=FakeUserReader)
    appointments: FakeAppointmentReader = field(default_factory=FakeAppointmentReader)
    conversations: FakeConversationReader = field(default_factory=FakeConversationReader)
    conversations_w: FakeConversationWriter | None = None
    messages_w: FakeMessageWriter = field(default_factory=FakeMessageWriter)
    notifications: FakeNotificationWriter = field(default_factory=FakeNotificationWriter)
    _commits: int = 0
    _rollbacks: int = 0

    def __post_init__(self) -> None:
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations)

    @property
    def _committed(self) -> bool:
        return self._commits > 0

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._commits += 1

    async def rollback(self) -> None:
        self._rollbacks += 1

    async def __aenter__(self) -> FakeUoW:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            await self.rollback()


def seeded_uow() -> FakeUoW:
    uow = FakeUoW()
    for profile in (DOCTOR, PATIENT, OTHER_PATIENT):
        uow.users._profiles[profile.id] = profile
    uow.appointments._store["appt1"] = Appointment(
        id="appt1", patient_id="pat1", doctor_id="doc1", status="confirmed",
    )
    return uow


@pytest.fixture
def uow() -> FakeUoW:
    return seeded_uow()


@pytest_asyncio.fixture
async def dispatcher(uow: FakeUoW) -> AsyncIterator[NotificationDispatcher]:
    notifications = NotificationDispatcher(lambda: uow, max_attempts=3, base_delay=0, max_delay=0)
    yield notifications
    await notifications.drain()


@pytest.fixture
def hub(uow: FakeUoW, dispatcher: NotificationDispatcher) -> RealtimeHub:
    return RealtimeHub(lambda: uow, dispatcher)


async def connect_all(hub: RealtimeHub, *principals: Principal) -> list[FakeConnection]:
    """Connect one fresh socket per principal and discard the presence chatter."""
    conns = []
    for principal in principals:
        conn = FakeConnection()
        await hub.connect(conn, principal)
        conns.append(conn)
    for conn in conns:
        conn.clear()
    return conns
