from __future__ import annotations

from dataclasses import dataclass

from telemed_realtime.domain.entities.message import Attachment
from telemed_realtime.domain.value_objects.enums import MessageType


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    recipient_id: str
    content: str = ""
    type: MessageType = MessageType.TEXT
    attachment: Attachment | None = None
