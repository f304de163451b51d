from __future__ import annotations

import pytest

from telemed_realtime.domain.value_objects.enums import NotificationType
from telemed_realtime.realtime.notifications import NotificationDispatcher
from telemed_realtime.services.notification_service import build_notification, render_template


def test_new_message_template():
    title, message = render_template(NotificationType.NEW_MESSAGE, sender_name="Gregory House")

    assert title == "New Message"
    assert "Gregory House" in message


def test_unknown_type_or_missing_field_falls_back():
    assert render_template("appointment_reminder")[0] == "Notification"
    assert render_template(NotificationType.VIDEO_CALL_REQUEST)[0] == "Notification"


def test_build_notification_stamps_fields():
    n = build_notification(
        NotificationType.VIDEO_CALL_REQUEST,
        recipient_id="doc1",
        sender_id="pat1",
        data={"appointmentId": "appt1"},
        caller_name="Jane Doe",
    )

    assert n.type == "video_call_request"
    assert n.title == "Incoming Video Call"
    assert n.data == {"appointmentId": "appt1"}
    assert n.created_at.tzinfo is not None


def _note():
    return build_notification(
        NotificationType.NEW_MESSAGE, recipient_id="pat1", sender_id="doc1", sender_name="Dr. House",
    )


@pytest.mark.asyncio
async def test_dispatch_persists_in_background(dispatcher, uow):
    task = dispatcher.dispatch(_note())
    assert dispatcher.pending == 1

    await task

    assert len(uow.notifications._records) == 1
    assert uow._commits == 1
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_transient_failures_are_retried(dispatcher, uow):
    uow.notifications.failures_left = 2

    await dispatcher.dispatch(_note())

    assert len(uow.notifications._records) == 1
    assert uow._rollbacks == 2


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(dispatcher, uow):
    uow.notifications.failures_left = 10

    await dispatcher.dispatch(_note())

    assert uow.notifications._records == []
    assert uow.notifications.failures_left == 7


def test_backoff_is_capped():
    notifications = NotificationDispatcher(lambda: None, base_delay=1.0, max_delay=5.0)

    assert [notifications.backoff(a) for a in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]
