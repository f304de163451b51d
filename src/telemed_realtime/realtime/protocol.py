"""Inbound WebSocket events: a closed set of tagged variants.

Every frame is ``{"type": <event name>, "data": {...}}`` with camelCase
payload fields. Parsing yields exactly one of the ``*Event`` models below.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from telemed_realtime.domain.value_objects.enums import MessageType


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversationRef(_Payload):
    conversation_id: str


class AppointmentRef(_Payload):
    appointment_id: str


class SendMessageData(_Payload):
    recipient_id: str
    content: str = ""
    message_type: MessageType = MessageType.TEXT
    file_url: str = ""
    file_name: str = ""
    file_size: int = Field(default=0, ge=0)


class InitiateCallData(_Payload):
    appointment_id: str
    to: str
    caller_name: str = ""
    caller_role: str = ""


class CallReplyData(_Payload):
    appointment_id: str
    caller_id: str


# Negotiation blobs are relayed verbatim and never inspected.
class OfferData(_Payload):
    appointment_id: str
    offer: Any


class AnswerData(_Payload):
    appointment_id: str
    answer: Any


class IceCandidateData(_Payload):
    appointment_id: str
    candidate: Any


class EmptyData(_Payload):
    pass


class JoinConversationEvent(BaseModel):
    type: Literal["join-conversation"]
    data: ConversationRef


class SendMessageEvent(BaseModel):
    type: Literal["send-message"]
    data: SendMessageData


class MarkReadEvent(BaseModel):
    type: Literal["mark-read"]
    data: ConversationRef


class JoinAppointmentEvent(BaseModel):
    type: Literal["join-appointment"]
    data: AppointmentRef


class InitiateCallEvent(BaseModel):
    type: Literal["initiate-video-call"]
    data: InitiateCallData


class AcceptCallEvent(BaseModel):
    type: Literal["accept-call"]
    data: CallReplyData


class DeclineCallEvent(BaseModel):
    type: Literal["decline-call"]
    data: CallReplyData


class EndCallEvent(BaseModel):
    type: Literal["end-call"]
    data: AppointmentRef


class OfferEvent(BaseModel):
    type: Literal["video-call-offer"]
    data: OfferData


class AnswerEvent(BaseModel):
    type: Literal["video-call-answer"]
    data: AnswerData


class IceCandidateEvent(BaseModel):
    type: Literal["ice-candidate"]
    data: IceCandidateData


class PingEvent(BaseModel):
    type: Literal["ping"]
    data: EmptyData = EmptyData()


InboundEvent = Annotated[
    Union[
        JoinConversationEvent,
        SendMessageEvent,
        MarkReadEvent,
        JoinAppointmentEvent,
        InitiateCallEvent,
        AcceptCallEvent,
        DeclineCallEvent,
        EndCallEvent,
        OfferEvent,
        AnswerEvent,
        IceCandidateEvent,
        PingEvent,
    ],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[InboundEvent] = TypeAdapter(InboundEvent)


def parse_inbound(raw: str | bytes) -> InboundEvent:
    """Validate one frame. Raises pydantic.ValidationError on anything malformed."""
    return _inbound_adapter.validate_json(raw)


def parse_inbound_obj(obj: Any) -> InboundEvent:
    return _inbound_adapter.validate_python(obj)
