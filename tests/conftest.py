"""
Pytest configuration: in-memory SQLite per test, FastAPI client bound to it,
Redis fan-out replaced by a recorder.
"""

import os

# Must be set before any telemed module builds its engine
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from datetime import time
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from telemed.config.database import Base, get_db
from telemed.main import app
from telemed.models.appointment import Appointment, AppointmentStatus, ConsultationType
from telemed.models.doctor import Doctor
from telemed.models.timetable import DoctorTimetable
from telemed.services.redis_service import redis_service


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create test client with overridden database"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def published(monkeypatch):
    """Chat messages that would have gone to Redis"""
    messages = []

    def fake_publish(appointment_id, payload):
        messages.append((appointment_id, payload))
        return True

    monkeypatch.setattr(redis_service, "publish_chat_message", fake_publish)
    return messages


@pytest.fixture
def doctor(db_session):
    doctor = Doctor(
        doctor_id="DOC001",
        name="Dr. Amina Mushi",
        specialization="Cardiology",
        consultation_fee=25000,
        is_verified=True
    )
    db_session.add(doctor)
    db_session.commit()
    db_session.refresh(doctor)
    return doctor


@pytest.fixture
def monday_timetable(db_session, doctor):
    """Monday 08:00-10:00"""
    entry = DoctorTimetable(
        doctor_id=doctor.doctor_id,
        day_of_week=0,
        start_time=time(8, 0),
        end_time=time(10, 0),
        location="Clinic A",
        is_available=True
    )
    db_session.add(entry)
    db_session.commit()
    return entry


@pytest.fixture
def make_appointment(db_session):
    """Insert an appointment row directly, bypassing booking checks"""
    def _make(start, duration_minutes=30, status=AppointmentStatus.PENDING,
              doctor_id="DOC001", patient_id="PAT001", **extra):
        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=start,
            duration_minutes=duration_minutes,
            consultation_type=extra.pop("consultation_type", ConsultationType.VIDEO),
            status=status,
            **extra
        )
        db_session.add(appointment)
        db_session.commit()
        db_session.refresh(appointment)
        return appointment
    return _make
