"""Notification templating and construction.

Persistence happens out of band through the NotificationDispatcher.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from telemed_realtime.domain.entities.notification import Notification
from telemed_realtime.domain.value_objects.enums import NotificationType

_TEMPLATES: dict[str, tuple[str, str]] = {
    NotificationType.NEW_MESSAGE: (
        "New Message",
        "You have a new message from {sender_name}. Please check your messages for details.",
    ),
    NotificationType.VIDEO_CALL_REQUEST: (
        "Incoming Video Call",
        "{caller_name} is requesting a video consultation. Please join the call when ready.",
    ),
}

_FALLBACK = ("Notification", "You have a new notification from TeleMed Healthcare.")


def render_template(notification_type: str, **data: Any) -> tuple[str, str]:
    """Return (title, message) for a notification type."""
    title, body = _TEMPLATES.get(notification_type, _FALLBACK)
    try:
        return title, body.format(**data)
    except KeyError:
        return _FALLBACK


def build_notification(
    notification_type: str,
    *,
    recipient_id: str,
    sender_id: str,
    data: dict[str, Any] | None = None,
    **template_data: Any,
) -> Notification:
    title, message = render_template(notification_type, **template_data)
    return Notification(
        id=uuid.uuid4(),
        recipient_id=recipient_id,
        sender_id=sender_id,
        type=str(notification_type),
        title=title,
        message=message,
        created_at=datetime.now(timezone.utc),
        data=data or {},
    )
