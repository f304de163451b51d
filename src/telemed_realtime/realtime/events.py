"""Outbound event names and payload builders."""
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from telemed_realtime.domain.entities.message import Message
from telemed_realtime.domain.entities.user import UserProfile

USER_ONLINE = "user-online"
USER_OFFLINE = "user-offline"
USER_BUSY = "user-busy"
NEW_MESSAGE = "new-message"
NEW_NOTIFICATION = "new-notification"
INCOMING_VIDEO_CALL = "incoming-video-call"
CALL_ACCEPTED = "call-accepted"
START_WEBRTC_CALL = "start-webrtc-call"
CALL_DECLINED = "call-declined"
CALL_ENDED = "call-ended"
VIDEO_CALL_OFFER = "video-call-offer"
VIDEO_CALL_ANSWER = "video-call-answer"
ICE_CANDIDATE = "ice-candidate"
ERROR = "error"
PONG = "pong"

DISCONNECT_REASON = "User disconnected"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserSnapshot(_CamelModel):
    id: str
    first_name: str
    last_name: str
    role: str
    avatar: str = ""
    specialization: str | None = None


class MessageRecord(_CamelModel):
    """Wire shape of a persisted message. Clients dedupe by ``id``."""

    id: UUID
    conversation_id: UUID
    sender: UserSnapshot | str
    recipient: str
    content: str
    message_type: str
    file_url: str = ""
    file_name: str = ""
    file_size: int = 0
    is_read: bool
    created_at: datetime


def _snapshot(profile: UserProfile) -> UserSnapshot:
    return UserSnapshot(
        id=profile.id,
        first_name=profile.first_name,
        last_name=profile.last_name,
        role=profile.role,
        avatar=profile.avatar,
        specialization=profile.specialization,
    )


def user_snapshot(profile: UserProfile) -> dict[str, Any]:
    return _snapshot(profile).model_dump(by_alias=True, mode="json")


def presence_payload(user_id: str, profile: UserProfile) -> dict[str, Any]:
    return {"userId": user_id, "user": user_snapshot(profile)}


def message_record(message: Message, sender: UserProfile | None = None) -> dict[str, Any]:
    att = message.attachment
    record = MessageRecord(
        id=message.id,
        conversation_id=message.conversation_id,
        sender=_snapshot(sender) if sender else message.sender_id,
        recipient=message.recipient_id,
        content=message.content,
        message_type=message.type,
        file_url=att.url if att else "",
        file_name=att.name if att else "",
        file_size=att.size if att else 0,
        is_read=message.is_read,
        created_at=message.created_at,
    )
    return record.model_dump(by_alias=True, mode="json")


def error_payload(message: str) -> dict[str, Any]:
    return {"message": message}
