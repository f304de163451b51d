"""Call lifecycle: idle -> calling -> accepted -> idle, plus WebRTC relay.

Registry transitions are synchronous; every await below happens after the
registry already reflects the new state.
"""
from __future__ import annotations

import logging
from typing import Any

from telemed_realtime.application.dto.principal import Principal
from telemed_realtime.application.exceptions import CallBusyError, ForbiddenError, NotFoundError
from telemed_realtime.application.policies.permissions import assert_appointment_access
from telemed_realtime.application.ports.notifications import NotificationSink
from telemed_realtime.application.uow import UnitOfWorkFactory
from telemed_realtime.domain.entities.call import CallDescriptor
from telemed_realtime.domain.value_objects.enums import CallStatus, NotificationType
from telemed_realtime.realtime import events
from telemed_realtime.realtime.call_registry import CallRegistry
from telemed_realtime.realtime.connection import Connection, deliver
from telemed_realtime.realtime.protocol import (
    AnswerData,
    CallReplyData,
    IceCandidateData,
    InitiateCallData,
    OfferData,
)
from telemed_realtime.realtime.rooms import RoomRegistry, appointment_room
from telemed_realtime.realtime.session_directory import SessionDirectory
from telemed_realtime.services.notification_service import build_notification

logger = logging.getLogger(__name__)


class CallSignaling:
    def __init__(
        self,
        sessions: SessionDirectory,
        calls: CallRegistry,
        rooms: RoomRegistry,
        notifications: NotificationSink,
        uow_factory: UnitOfWorkFactory,
    ) -> None:
        self._sessions = sessions
        self._calls = calls
        self._rooms = rooms
        self._notifications = notifications
        self._uow_factory = uow_factory

    async def join_appointment(
        self,
        connection: Connection,
        principal: Principal,
        appointment_id: str,
    ) -> bool:
        """Join the signaling room if the user is the patient or the doctor."""
        async with self._uow_factory() as uow:
            appointment = await uow.appointments.get_by_id(appointment_id)
        try:
            assert_appointment_access(principal, appointment)
        except (NotFoundError, ForbiddenError):
            logger.debug("Ignoring join of appointment %s by %s", appointment_id, principal.user_id)
            return False

        self._rooms.join(appointment_room(appointment_id), connection)
        return True

    async def initiate(
        self,
        connection: Connection,
        principal: Principal,
        data: InitiateCallData,
    ) -> CallDescriptor | None:
        caller_id, callee_id = principal.user_id, data.to

        if not self._sessions.is_online(callee_id):
            await deliver(connection, events.USER_OFFLINE, {"message": "User is not online"})
            return None

        try:
            call = self._calls.open(
                CallDescriptor(
                    appointment_id=data.appointment_id,
                    caller_id=caller_id,
                    callee_id=callee_id,
                    status=CallStatus.CALLING,
                    caller_connection=connection,
                )
            )
        except CallBusyError:
            await deliver(connection, events.USER_BUSY, {"message": "User is busy"})
            return None

        logger.info("Call %s -> %s for appointment %s", caller_id, callee_id, data.appointment_id)

        caller_name = data.caller_name or principal.display_name
        await self._sessions.send_to_user(
            callee_id,
            events.INCOMING_VIDEO_CALL,
            {
                "appointmentId": data.appointment_id,
                "from": caller_id,
                "callerName": caller_name,
                "callerRole": data.caller_role or principal.profile.role,
            },
        )

        try:
            self._notifications.dispatch(
                build_notification(
                    NotificationType.VIDEO_CALL_REQUEST,
                    recipient_id=callee_id,
                    sender_id=caller_id,
                    data={"appointmentId": data.appointment_id},
                    caller_name=caller_name,
                )
            )
        except Exception:
            logger.exception("Call notification failed for %s -> %s", caller_id, callee_id)
        return call

    async def accept(
        self,
        connection: Connection,
        principal: Principal,
        data: CallReplyData,
    ) -> CallDescriptor | None:
        call = self._calls.accept(data.caller_id, principal.user_id, connection)
        if call is None:
            logger.debug("No pending call from %s to %s", data.caller_id, principal.user_id)
            return None

        logger.info("Call %s -> %s accepted", call.caller_id, call.callee_id)
        # The callee already knows it accepted; only the caller starts negotiation.
        await self._to_party(
            call, call.caller_id, events.CALL_ACCEPTED,
            {"appointmentId": call.appointment_id, "recipientId": principal.user_id},
        )
        await self._to_party(
            call, call.caller_id, events.START_WEBRTC_CALL,
            {"appointmentId": call.appointment_id},
        )
        return call

    async def decline(
        self,
        connection: Connection,
        principal: Principal,
        data: CallReplyData,
    ) -> CallDescriptor | None:
        call = self._calls.close_between(principal.user_id, data.caller_id)
        payload = {"appointmentId": data.appointment_id}
        if call is not None:
            logger.info("Call %s -> %s declined", call.caller_id, call.callee_id)
            await self._to_party(call, data.caller_id, events.CALL_DECLINED, payload)
        else:
            await self._sessions.send_to_user(data.caller_id, events.CALL_DECLINED, payload)
        return call

    async def end(
        self,
        connection: Connection,
        principal: Principal,
        appointment_id: str,
    ) -> CallDescriptor | None:
        call = self._calls.close(principal.user_id)
        if call is None:
            return None

        logger.info("Call %s -> %s ended by %s", call.caller_id, call.callee_id, principal.user_id)
        payload = {"appointmentId": appointment_id}
        await self._to_party(call, call.counterpart_of(principal.user_id), events.CALL_ENDED, payload)
        await self._rooms.broadcast(
            appointment_room(appointment_id), events.CALL_ENDED, payload, exclude=connection,
        )
        return call

    async def handle_disconnect(
        self,
        connection: Connection,
        principal: Principal,
        *,
        went_offline: bool,
    ) -> CallDescriptor | None:
        """End the user's call when the connection carrying it is gone.

        A ringing callee has no bound connection yet, so its call ends only
        once the user has no connection left at all.
        """
        user_id = principal.user_id
        call = self._calls.get(user_id)
        if call is None:
            return None

        bound = call.connection_of(user_id)
        if bound is not connection and not (bound is None and went_offline):
            return None

        self._calls.close(user_id)
        logger.info("Call %s -> %s dropped: %s disconnected", call.caller_id, call.callee_id, user_id)
        payload = {"appointmentId": call.appointment_id, "reason": events.DISCONNECT_REASON}
        await self._to_party(call, call.counterpart_of(user_id), events.CALL_ENDED, payload)
        await self._rooms.broadcast(
            appointment_room(call.appointment_id), events.CALL_ENDED, payload, exclude=connection,
        )
        return call

    async def relay(
        self,
        connection: Connection,
        principal: Principal,
        appointment_id: str,
        event: str,
        field: str,
        payload: Any,
    ) -> int:
        """Forward an opaque negotiation blob to the other members of the signaling room."""
        return await self._rooms.broadcast(
            appointment_room(appointment_id),
            event,
            {field: payload, "from": principal.user_id},
            exclude=connection,
        )

    async def relay_offer(self, connection: Connection, principal: Principal, data: OfferData) -> int:
        return await self.relay(
            connection, principal, data.appointment_id, events.VIDEO_CALL_OFFER, "offer", data.offer,
        )

    async def relay_answer(self, connection: Connection, principal: Principal, data: AnswerData) -> int:
        return await self.relay(
            connection, principal, data.appointment_id, events.VIDEO_CALL_ANSWER, "answer", data.answer,
        )

    async def relay_ice_candidate(
        self,
        connection: Connection,
        principal: Principal,
        data: IceCandidateData,
    ) -> int:
        return await self.relay(
            connection, principal, data.appointment_id, events.ICE_CANDIDATE, "candidate", data.candidate,
        )

    async def _to_party(
        self,
        call: CallDescriptor,
        user_id: str,
        event: str,
        data: dict[str, Any],
    ) -> None:
        conn = call.connection_of(user_id)
        if conn is not None and self._sessions.has_connection(user_id, conn):
            await deliver(conn, event, data)
        else:
            await self._sessions.send_to_user(user_id, event, data)
