"""
HTTP surface and error envelope
"""

from fastapi.testclient import TestClient
from helpers import MONDAY
from telemed.main import app
from telemed.config.redis_config import redis_config


def create_doctor_with_timetable(client):
    response = client.post("/api/v1/doctors/", json={
        "doctor_id": "DOC100",
        "name": "Dr. Neema Said",
        "specialization": "General Medicine",
        "consultation_fee": 15000,
        "is_verified": True
    })
    assert response.status_code == 201

    response = client.post("/api/v1/doctors/DOC100/timetable", json={
        "day_of_week": 0,
        "start_time": "08:00",
        "end_time": "10:00",
        "location": "Room 4"
    })
    assert response.status_code == 201


def book(client, hhmm, patient_id="PAT001"):
    return client.post("/api/v1/appointments/", json={
        "patient_id": patient_id,
        "doctor_id": "DOC100",
        "appointment_date": f"{MONDAY.isoformat()}T{hhmm}:00",
        "consultation_type": "video",
        "symptoms": "Fever"
    })


def test_health(client, monkeypatch):
    monkeypatch.setattr(redis_config, "test_connection", lambda: False)

    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "healthy"
    assert response.json()["data"]["redis"] == "unavailable"


def test_slots_before_and_after_booking(client):
    create_doctor_with_timetable(client)

    response = client.get(f"/api/v1/appointments/slots/DOC100/{MONDAY.isoformat()}")
    assert response.status_code == 200
    assert response.json()["available_slots"] == ["08:00", "08:30", "09:00", "09:30"]

    assert book(client, "08:30").status_code == 201

    body = client.get(f"/api/v1/appointments/slots/DOC100/{MONDAY.isoformat()}").json()
    assert body["slots"] == ["08:00", "08:30", "09:00", "09:30"]
    assert body["available_slots"] == ["08:00", "09:00", "09:30"]
    assert body["day_of_week"] == 0


def test_booking_conflict_envelope(client):
    create_doctor_with_timetable(client)
    created = book(client, "08:30")
    assert created.json()["status"] == "pending"
    assert created.json()["fee"] == 15000

    response = book(client, "08:30", patient_id="PAT002")

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error"]["type"] == "ConflictError"
    assert body["error"]["details"]["alternatives"] == ["08:00", "09:00", "09:30"]


def test_accept_and_notifications(client):
    create_doctor_with_timetable(client)
    appointment_id = book(client, "09:00").json()["id"]

    response = client.post(f"/api/v1/appointments/{appointment_id}/transition", json={"action": "accept"})
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    feed = client.get("/api/v1/notifications/user/PAT001").json()
    assert len(feed) == 1
    assert feed[0]["is_read"] is False

    marked = client.patch(f"/api/v1/notifications/{feed[0]['id']}/read")
    assert marked.json()["is_read"] is True


def test_decline_requires_reason(client):
    create_doctor_with_timetable(client)
    appointment_id = book(client, "09:00").json()["id"]

    response = client.post(f"/api/v1/appointments/{appointment_id}/decline", json={"reason": "  "})
    assert response.status_code == 400
    assert response.json()["error"]["type"] == "ValidationError"

    response = client.post(f"/api/v1/appointments/{appointment_id}/decline", json={
        "reason": "Travelling",
        "suggested_time": "2024-01-08T09:00:00"
    })
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["suggested_time"] == "2024-01-08T09:00:00"


def test_invalid_transition_is_conflict(client):
    create_doctor_with_timetable(client)
    appointment_id = book(client, "09:00").json()["id"]

    response = client.post(f"/api/v1/appointments/{appointment_id}/complete")

    assert response.status_code == 409
    assert response.json()["error"]["type"] == "InvalidTransitionError"


def test_unknown_appointment_is_404(client):
    response = client.get("/api/v1/appointments/12345")

    assert response.status_code == 404
    assert response.json()["error"]["type"] == "NotFoundError"


def test_timetable_window_validated(client):
    create_doctor_with_timetable(client)

    response = client.post("/api/v1/doctors/DOC100/timetable", json={
        "day_of_week": 1,
        "start_time": "12:00",
        "end_time": "09:00"
    })

    assert response.status_code == 422
    assert response.json()["error"]["message"] == "Validation Error"


def test_timetable_update_and_delete(client):
    create_doctor_with_timetable(client)
    entry_id = client.get("/api/v1/doctors/DOC100/timetable").json()[0]["id"]

    updated = client.put(f"/api/v1/doctors/timetable/{entry_id}", json={"end_time": "09:00"})
    assert updated.status_code == 200
    assert client.get(f"/api/v1/appointments/slots/DOC100/{MONDAY.isoformat()}").json()["slots"] == [
        "08:00", "08:30"
    ]

    rejected = client.put(f"/api/v1/doctors/timetable/{entry_id}", json={"start_time": "09:30"})
    assert rejected.status_code == 400

    assert client.delete(f"/api/v1/doctors/timetable/{entry_id}").status_code == 200
    assert client.get(f"/api/v1/appointments/slots/DOC100/{MONDAY.isoformat()}").json()["slots"] == []


def test_chat_flow(client, published):
    create_doctor_with_timetable(client)
    conversation = client.post("/api/v1/chat/conversations", json={
        "patient_id": "PAT001", "doctor_id": "DOC100"
    }).json()

    sent = client.post(f"/api/v1/chat/{conversation['id']}/messages", json={
        "sender_id": "DOC100", "message": "How are you feeling?"
    })
    assert sent.status_code == 201
    assert len(published) == 1

    messages = client.get(f"/api/v1/chat/{conversation['id']}/messages").json()
    assert [m["message"] for m in messages] == ["How are you feeling?"]


def test_chatbot_endpoint(client):
    create_doctor_with_timetable(client)

    response = client.post("/api/v1/chatbot/message", json={"text": "tafuta daktari neema"})

    assert response.status_code == 200
    assert response.json()["items"][0]["doctor_id"] == "DOC100"


def test_reminder_dispatch_endpoint(client):
    response = client.post("/api/v1/reminders/dispatch")

    assert response.status_code == 200
    assert response.json() == {"processed": 0, "sent": 0}


def test_decline_reason_length_is_limited(client):
    create_doctor_with_timetable(client)
    appointment_id = book(client, "09:00").json()["id"]

    response = client.post(f"/api/v1/appointments/{appointment_id}/decline", json={"reason": "x" * 501})

    assert response.status_code == 422
    assert client.get(f"/api/v1/appointments/{appointment_id}").json()["status"] == "pending"


def test_shutdown_closes_redis(db_session, monkeypatch):
    closed = []
    monkeypatch.setattr(redis_config, "close", lambda: closed.append(True))

    with TestClient(app):
        assert closed == []

    assert closed == [True]
