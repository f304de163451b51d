from __future__ import annotations

from telemed_realtime.application.dto.principal import Principal
from telemed_realtime.application.exceptions import ForbiddenError, NotFoundError
from telemed_realtime.domain.entities.appointment import Appointment
from telemed_realtime.domain.entities.conversation import Conversation


def assert_conversation_access(
    principal: Principal,
    conversation: Conversation | None,
) -> Conversation:
    """Raise if conversation doesn't exist or principal is not one of its two participants."""
    if conversation is None:
        raise NotFoundError("Conversation not found")
    if not conversation.has_participant(principal.user_id):
        raise ForbiddenError("Not a participant of this conversation")
    return conversation


def assert_appointment_access(
    principal: Principal,
    appointment: Appointment | None,
) -> Appointment:
    if appointment is None:
        raise NotFoundError("Appointment not found")
    if not appointment.involves(principal.user_id):
        raise ForbiddenError("Not a party to this appointment")
    return appointment
