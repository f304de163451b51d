from __future__ import annotations

import uuid

import pytest

from telemed_realtime.realtime.protocol import SendMessageData
from tests.conftest import connect_all, make_conversation


@pytest.mark.asyncio
async def test_message_reaches_recipient_and_notifies(hub, dispatcher, uow, doctor, patient):
    doc_conn, pat_conn = await connect_all(hub, doctor, patient)

    msg = await hub.router.send_message(
        doc_conn, doctor, SendMessageData(recipient_id="pat1", content="Take two pills"),
    )
    await dispatcher.drain()

    assert msg is not None
    (record,) = pat_conn.payloads("new-message")
    assert record["id"] == str(msg.id)
    assert record["content"] == "Take two pills"
    assert record["sender"]["firstName"] == "Gregory"
    assert record["recipient"] == "pat1"
    assert record["messageType"] == "text"
    assert record["isRead"] is False

    (note,) = pat_conn.payloads("new-notification")
    assert note["type"] == "new_message"
    assert note["sender"] == "Gregory House"
    assert note["content"] == "Take two pills"
    assert note["conversationId"] == str(msg.conversation_id)

    (stored,) = uow.notifications._records
    assert stored.recipient_id == "pat1"
    assert stored.data["messageId"] == str(msg.id)
    assert doc_conn.sent == []


@pytest.mark.asyncio
async def test_room_member_recipient_gets_message_twice(hub, uow, doctor, patient):
    conversation = make_conversation("doc1", "pat1")
    uow.conversations._store[conversation.id] = conversation
    doc_conn, pat_conn = await connect_all(hub, doctor, patient)
    assert await hub.router.join_conversation(pat_conn, patient, str(conversation.id))
    assert await hub.router.join_conversation(doc_conn, doctor, str(conversation.id))

    msg = await hub.router.send_message(
        doc_conn, doctor, SendMessageData(recipient_id="pat1", content="hi"),
    )

    ids = [p["id"] for p in pat_conn.payloads("new-message")]
    assert ids == [str(msg.id), str(msg.id)]
    assert [p["id"] for p in doc_conn.payloads("new-message")] == [str(msg.id)]


@pytest.mark.asyncio
async def test_offline_recipient_still_gets_stored_notification(hub, dispatcher, uow, doctor):
    (doc_conn,) = await connect_all(hub, doctor)

    msg = await hub.router.send_message(
        doc_conn, doctor, SendMessageData(recipient_id="pat1", content="Results are in"),
    )
    await dispatcher.drain()

    assert msg is not None
    assert len(uow.messages_w._messages) == 1
    assert len(uow.notifications._records) == 1
    assert doc_conn.sent == []


@pytest.mark.asyncio
async def test_file_message_preview_in_notification(hub, patient, doctor):
    pat_conn, doc_conn = await connect_all(hub, patient, doctor)

    await hub.router.send_message(
        pat_conn, patient,
        SendMessageData(
            recipient_id="doc1", message_type="file",
            file_url="/uploads/xray.pdf", file_name="xray.pdf", file_size=2048,
        ),
    )

    (record,) = doc_conn.payloads("new-message")
    assert record["fileName"] == "xray.pdf"
    assert record["fileSize"] == 2048
    assert doc_conn.payloads("new-notification")[0]["content"] == "Sent a file"


@pytest.mark.asyncio
async def test_file_metadata_kept_without_url(hub, uow, patient, doctor):
    pat_conn, doc_conn = await connect_all(hub, patient, doctor)
    data = SendMessageData.model_validate(
        {"recipientId": "doc1", "content": "", "messageType": "file", "fileName": "xray.pdf", "fileSize": 2048}
    )

    msg = await hub.router.send_message(pat_conn, patient, data)

    assert msg is not None
    assert msg.attachment is not None
    assert msg.attachment.name == "xray.pdf"
    assert msg.attachment.size == 2048
    assert uow.messages_w._messages[0].attachment == msg.attachment
    (record,) = doc_conn.payloads("new-message")
    assert record["messageType"] == "file"
    assert record["fileName"] == "xray.pdf"
    assert record["fileSize"] == 2048
    assert record["fileUrl"] == ""
    conversation = uow.conversations._store[msg.conversation_id]
    assert conversation.last_message.content == "Sent a file"
    assert conversation.unread_for("doc1") == 1


@pytest.mark.asyncio
async def test_failed_persist_reports_error_to_sender(hub, uow, doctor, patient):
    doc_conn, pat_conn = await connect_all(hub, doctor, patient)
    uow.conversations_w.fail_on_write = True

    msg = await hub.router.send_message(
        doc_conn, doctor, SendMessageData(recipient_id="pat1", content="hi"),
    )

    assert msg is None
    assert doc_conn.sent == [("error", {"message": "Failed to send message"})]
    assert pat_conn.sent == []
    assert uow._rollbacks == 1


@pytest.mark.asyncio
async def test_empty_text_is_rejected(hub, doctor):
    (doc_conn,) = await connect_all(hub, doctor)

    msg = await hub.router.send_message(
        doc_conn, doctor, SendMessageData(recipient_id="pat1", content="   "),
    )

    assert msg is None
    assert doc_conn.sent == [("error", {"message": "Failed to send message"})]


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_send(hub, dispatcher, doctor, patient, monkeypatch):
    doc_conn, pat_conn = await connect_all(hub, doctor, patient)

    def boom(notification):
        raise RuntimeError("queue full")

    monkeypatch.setattr(dispatcher, "dispatch", boom)

    msg = await hub.router.send_message(
        doc_conn, doctor, SendMessageData(recipient_id="pat1", content="hi"),
    )

    assert msg is not None
    assert len(pat_conn.payloads("new-message")) == 1
    assert "error" not in doc_conn.names()


@pytest.mark.asyncio
async def test_non_participant_join_is_silent(hub, uow, other_patient):
    conversation = make_conversation("doc1", "pat1")
    uow.conversations._store[conversation.id] = conversation
    (conn,) = await connect_all(hub, other_patient)

    assert await hub.router.join_conversation(conn, other_patient, str(conversation.id)) is False
    assert await hub.router.join_conversation(conn, other_patient, str(uuid.uuid4())) is False
    assert await hub.router.join_conversation(conn, other_patient, "not-a-uuid") is False
    assert conn.sent == []
    assert hub.rooms.rooms_of(conn) == frozenset()


@pytest.mark.asyncio
async def test_mark_read_resets_counter(hub, uow, doctor, patient):
    doc_conn, pat_conn = await connect_all(hub, doctor, patient)
    msg = await hub.router.send_message(
        doc_conn, doctor, SendMessageData(recipient_id="pat1", content="hi"),
    )
    assert uow.conversations._store[msg.conversation_id].unread_for("pat1") == 1

    assert await hub.router.mark_read(patient, str(msg.conversation_id)) is True

    conversation = uow.conversations._store[msg.conversation_id]
    assert conversation.unread_for("pat1") == 0
    assert all(m.is_read for m in uow.messages_w._messages)
