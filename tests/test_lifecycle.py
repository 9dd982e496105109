"""
Status lifecycle: accept, decline, complete
"""

import pytest
from datetime import datetime
from unittest.mock import MagicMock
from telemed.models.appointment import AppointmentStatus
from telemed.models.notification import Notification
from telemed.models.reminder import AppointmentReminder
from telemed.services.appointment_service import AppointmentService
from telemed.utils.exceptions import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from helpers import MONDAY, at


def patient_notifications(db_session, patient_id="PAT001"):
    return db_session.query(Notification).filter(Notification.user_id == patient_id).all()


def test_accept_approves_and_notifies_patient_once(db_session, doctor, make_appointment):
    appointment = make_appointment(at(MONDAY, "08:30"))

    accepted = AppointmentService.accept(db_session, appointment.id)

    assert accepted.status == AppointmentStatus.APPROVED
    notifications = patient_notifications(db_session)
    assert len(notifications) == 1
    assert notifications[0].related_id == appointment.id
    assert "approved" in notifications[0].message


def test_accept_schedules_reminders(db_session, doctor, make_appointment):
    appointment = make_appointment(at(MONDAY, "08:30"))

    AppointmentService.accept(db_session, appointment.id)

    reminders = db_session.query(AppointmentReminder).filter(
        AppointmentReminder.appointment_id == appointment.id
    ).all()
    assert sorted(r.reminder_type for r in reminders) == ["1_hour", "24_hours"]
    assert all(r.status == "pending" for r in reminders)


def test_accept_rejects_overlap_without_mutation(db_session, doctor, make_appointment):
    make_appointment(at(MONDAY, "08:00"), duration_minutes=60, status=AppointmentStatus.APPROVED)
    later = make_appointment(at(MONDAY, "08:30"), patient_id="PAT002")

    with pytest.raises(ConflictError):
        AppointmentService.accept(db_session, later.id)

    db_session.refresh(later)
    assert later.status == AppointmentStatus.PENDING
    assert patient_notifications(db_session, "PAT002") == []


def test_accept_ignores_own_interval(db_session, doctor, make_appointment):
    appointment = make_appointment(at(MONDAY, "08:00"), duration_minutes=60)

    assert AppointmentService.accept(db_session, appointment.id).status == AppointmentStatus.APPROVED


def test_decline_with_blank_reason_touches_nothing():
    db = MagicMock()

    for reason in (None, "", "   \n"):
        with pytest.raises(ValidationError):
            AppointmentService.decline(db, 1, reason)
        with pytest.raises(ValidationError):
            AppointmentService.transition_appointment(db, 1, "decline", reason=reason)

    assert db.mock_calls == []


def test_decline_stores_reason_and_suggestion(db_session, doctor, make_appointment):
    appointment = make_appointment(at(MONDAY, "08:30"))
    suggested = datetime(2024, 1, 2, 10, 0)

    declined = AppointmentService.decline(db_session, appointment.id, "  Fully booked that morning ", suggested)

    assert declined.status == AppointmentStatus.CANCELLED
    assert declined.notes == "Fully booked that morning"
    assert declined.suggested_time == suggested
    message = patient_notifications(db_session)[0].message
    assert "Fully booked that morning" in message
    assert "02/01/2024 10:00" in message


def test_decline_without_suggestion(db_session, doctor, make_appointment):
    appointment = make_appointment(at(MONDAY, "08:30"))

    declined = AppointmentService.decline(db_session, appointment.id, "On leave")

    assert declined.suggested_time is None
    assert "Suggested time" not in patient_notifications(db_session)[0].message


def test_declined_slot_can_be_booked_again(db_session, monday_timetable, make_appointment):
    appointment = make_appointment(at(MONDAY, "08:30"))
    AppointmentService.decline(db_session, appointment.id, "Emergency surgery")

    assert "08:30" in AppointmentService.get_available_slots(db_session, "DOC001", MONDAY)


def test_complete_requires_approval(db_session, doctor, make_appointment):
    appointment = make_appointment(at(MONDAY, "08:30"))

    with pytest.raises(InvalidTransitionError):
        AppointmentService.complete(db_session, appointment.id)

    AppointmentService.accept(db_session, appointment.id)
    completed = AppointmentService.complete(db_session, appointment.id)
    assert completed.status == AppointmentStatus.COMPLETED


@pytest.mark.parametrize("final_status", [AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED])
def test_final_states_have_no_exit(db_session, doctor, make_appointment, final_status):
    appointment = make_appointment(at(MONDAY, "08:30"), status=final_status)

    for action in ("accept", "decline", "complete"):
        with pytest.raises(InvalidTransitionError):
            AppointmentService.transition_appointment(db_session, appointment.id, action, reason="n/a")

    db_session.refresh(appointment)
    assert appointment.status == final_status
    assert patient_notifications(db_session) == []


def test_transition_dispatches_by_action(db_session, doctor, make_appointment):
    appointment = make_appointment(at(MONDAY, "08:30"), status=AppointmentStatus.SCHEDULED)

    result = AppointmentService.transition_appointment(db_session, appointment.id, " Accept ")

    assert result.status == AppointmentStatus.APPROVED


def test_transition_rejects_unknown_action(db_session, doctor, make_appointment):
    appointment = make_appointment(at(MONDAY, "08:30"))

    with pytest.raises(ValidationError):
        AppointmentService.transition_appointment(db_session, appointment.id, "reschedule")


def test_transition_unknown_appointment(db_session):
    with pytest.raises(NotFoundError):
        AppointmentService.transition_appointment(db_session, 999, "accept")
