"""
Doctor chat threads carried by appointments
"""

import pytest
from telemed.models.appointment import Appointment, AppointmentStatus, ConsultationType
from telemed.services.chat_service import ChatService
from telemed.utils.exceptions import NotFoundError, ValidationError
from helpers import MONDAY, at


def test_start_conversation_opens_chat_handle(db_session, doctor):
    conversation = ChatService.start_conversation(db_session, "PAT001", "DOC001")

    assert conversation.is_conversation is True
    assert conversation.consultation_type == ConsultationType.CHAT
    assert conversation.status == AppointmentStatus.SCHEDULED


def test_start_conversation_reuses_existing_thread(db_session, doctor):
    first = ChatService.start_conversation(db_session, "PAT001", "DOC001")
    second = ChatService.start_conversation(db_session, "PAT001", "DOC001")

    assert first.id == second.id
    assert db_session.query(Appointment).count() == 1


def test_start_conversation_reuses_active_booking(db_session, doctor, make_appointment):
    booking = make_appointment(at(MONDAY, "08:30"), status=AppointmentStatus.APPROVED)

    assert ChatService.start_conversation(db_session, "PAT001", "DOC001").id == booking.id


def test_start_conversation_unknown_doctor(db_session):
    with pytest.raises(NotFoundError):
        ChatService.start_conversation(db_session, "PAT001", "NOPE")


def test_send_message_stores_and_publishes(db_session, doctor, published):
    conversation = ChatService.start_conversation(db_session, "PAT001", "DOC001")

    message = ChatService.send_message(db_session, conversation.id, "PAT001", "  Hello daktari  ")

    assert message.message == "Hello daktari"
    assert published == [(conversation.id, message.to_dict())]


def test_send_message_rejects_outsiders_and_blank_text(db_session, doctor, published):
    conversation = ChatService.start_conversation(db_session, "PAT001", "DOC001")

    with pytest.raises(ValidationError):
        ChatService.send_message(db_session, conversation.id, "PAT999", "hi")
    with pytest.raises(ValidationError):
        ChatService.send_message(db_session, conversation.id, "PAT001", "   ")

    assert published == []


def test_messages_listed_in_order_and_marked_read(db_session, doctor):
    conversation = ChatService.start_conversation(db_session, "PAT001", "DOC001")
    ChatService.send_message(db_session, conversation.id, "PAT001", "first")
    ChatService.send_message(db_session, conversation.id, "DOC001", "second")
    ChatService.send_message(db_session, conversation.id, "PAT001", "third")

    messages = ChatService.list_messages(db_session, conversation.id)
    assert [m.message for m in messages] == ["first", "second", "third"]

    result = ChatService.mark_read(db_session, conversation.id, "DOC001")
    assert result["updated"] == 2
    db_session.expire_all()
    unread = [m.message for m in ChatService.list_messages(db_session, conversation.id) if not m.is_read]
    assert unread == ["second"]


def test_mark_read_unknown_conversation(db_session):
    with pytest.raises(NotFoundError):
        ChatService.mark_read(db_session, 999, "DOC001")
