from __future__ import annotations

from enum import StrEnum


class UserRole(StrEnum):
    PATIENT = "patient"
    DOCTOR = "doctor"


class PresenceStatus(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"


class MessageType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    FILE = "file"


class CallStatus(StrEnum):
    CALLING = "calling"
    ACCEPTED = "accepted"


class NotificationType(StrEnum):
    NEW_MESSAGE = "new_message"
    VIDEO_CALL_REQUEST = "video_call_request"
