from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from telemed_realtime.application.repositories.appointment import AppointmentReader
from telemed_realtime.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from telemed_realtime.application.repositories.message import MessageWriter
from telemed_realtime.application.repositories.notification import NotificationWriter
from telemed_realtime.application.repositories.user import UserReader


class UnitOfWork(Protocol):
    users: UserReader
    appointments: AppointmentReader
    conversations: ConversationReader
    conversations_w: ConversationWriter
    messages_w: MessageWriter
    notifications: NotificationWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


# A fresh unit of work per inbound event; the realtime layer never holds one open.
UnitOfWorkFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
