"""Per-process realtime coordinator: owns presence, rooms and calls."""
from __future__ import annotations

import logging
from typing import assert_never

from pydantic import ValidationError as PayloadError

from telemed_realtime.application.dto.principal import Principal
from telemed_realtime.application.ports.notifications import NotificationSink
from telemed_realtime.application.uow import UnitOfWorkFactory
from telemed_realtime.realtime import events
from telemed_realtime.realtime.call_registry import CallRegistry
from telemed_realtime.realtime.call_signaling import CallSignaling
from telemed_realtime.realtime.connection import Connection, deliver
from telemed_realtime.realtime.message_router import MessageRouter
from telemed_realtime.realtime.protocol import (
    AcceptCallEvent,
    AnswerEvent,
    DeclineCallEvent,
    EndCallEvent,
    IceCandidateEvent,
    InboundEvent,
    InitiateCallEvent,
    JoinAppointmentEvent,
    JoinConversationEvent,
    MarkReadEvent,
    OfferEvent,
    PingEvent,
    SendMessageEvent,
    parse_inbound,
)
from telemed_realtime.realtime.rooms import RoomRegistry
from telemed_realtime.realtime.session_directory import SessionDirectory

logger = logging.getLogger(__name__)

_FAILURE_MESSAGES = {
    "send-message": "Failed to send message",
    "initiate-video-call": "Failed to initiate call",
    "accept-call": "Failed to accept call",
}
_DEFAULT_FAILURE = "Something went wrong"


class RealtimeHub:
    """Entry point for one process's sockets.

    State is held per instance, so each app or test gets isolated
    directories. Nothing raised while handling an event escapes
    :meth:`dispatch`; the sender gets an ``error`` event instead.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        notifications: NotificationSink,
        *,
        sessions: SessionDirectory | None = None,
        rooms: RoomRegistry | None = None,
        calls: CallRegistry | None = None,
    ) -> None:
        self.sessions = sessions or SessionDirectory()
        self.rooms = rooms or RoomRegistry()
        self.calls = calls or CallRegistry()
        self.router = MessageRouter(self.sessions, self.rooms, notifications, uow_factory)
        self.signaling = CallSignaling(
            self.sessions, self.calls, self.rooms, notifications, uow_factory,
        )

    async def connect(self, connection: Connection, principal: Principal) -> None:
        logger.info("User %s connected (%s)", principal.user_id, connection.id)
        await self.sessions.register(principal.user_id, connection, principal.profile)

    async def disconnect(self, connection: Connection, principal: Principal) -> None:
        logger.info("User %s disconnected (%s)", principal.user_id, connection.id)
        self.rooms.leave_all(connection)
        gone = self.sessions.detach(principal.user_id, connection)
        try:
            await self.signaling.handle_disconnect(
                connection, principal, went_offline=gone is not None,
            )
        except Exception:
            logger.exception("Call cleanup failed for %s", principal.user_id)
        if gone is not None:
            await self.sessions.announce_offline(gone)

    async def receive(self, connection: Connection, principal: Principal, raw: str | bytes) -> None:
        """Parse one inbound frame and dispatch it."""
        try:
            event = parse_inbound(raw)
        except PayloadError:
            logger.debug("Invalid frame from %s", principal.user_id, exc_info=True)
            await deliver(connection, events.ERROR, events.error_payload("Invalid payload"))
            return
        await self.dispatch(connection, principal, event)

    async def dispatch(self, connection: Connection, principal: Principal, event: InboundEvent) -> None:
        try:
            await self._route(connection, principal, event)
        except Exception:
            logger.exception("Error handling %s from %s", event.type, principal.user_id)
            message = _FAILURE_MESSAGES.get(event.type, _DEFAULT_FAILURE)
            await deliver(connection, events.ERROR, events.error_payload(message))

    async def _route(self, connection: Connection, principal: Principal, event: InboundEvent) -> None:
        if isinstance(event, SendMessageEvent):
            await self.router.send_message(connection, principal, event.data)
        elif isinstance(event, JoinConversationEvent):
            await self.router.join_conversation(connection, principal, event.data.conversation_id)
        elif isinstance(event, MarkReadEvent):
            await self.router.mark_read(principal, event.data.conversation_id)
        elif isinstance(event, JoinAppointmentEvent):
            await self.signaling.join_appointment(connection, principal, event.data.appointment_id)
        elif isinstance(event, InitiateCallEvent):
            await self.signaling.initiate(connection, principal, event.data)
        elif isinstance(event, AcceptCallEvent):
            await self.signaling.accept(connection, principal, event.data)
        elif isinstance(event, DeclineCallEvent):
            await self.signaling.decline(connection, principal, event.data)
        elif isinstance(event, EndCallEvent):
            await self.signaling.end(connection, principal, event.data.appointment_id)
        elif isinstance(event, OfferEvent):
            await self.signaling.relay_offer(connection, principal, event.data)
        elif isinstance(event, AnswerEvent):
            await self.signaling.relay_answer(connection, principal, event.data)
        elif isinstance(event, IceCandidateEvent):
            await self.signaling.relay_ice_candidate(connection, principal, event.data)
        elif isinstance(event, PingEvent):
            await deliver(connection, events.PONG, {})
        else:
            assert_never(event)
