from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List
from telemed.config.database import get_db
from telemed.schemas.appointment import (
    AppointmentCreate,
    AppointmentResponse,
    DeclineRequest,
    SlotsResponse,
    TransitionRequest,
)
from telemed.services.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"description": "Slot already taken, error.details.alternatives lists up to 3 open slots"}
    }
)
def commit_booking(appointment: AppointmentCreate, db: Session = Depends(get_db)):
    """Request an appointment. It starts as pending until the doctor accepts it"""
    return AppointmentService.commit_booking(db, appointment)

@router.get("/slots/{doctor_id}/{target_date}", response_model=SlotsResponse)
def get_slots(doctor_id: str, target_date: date, db: Session = Depends(get_db)):
    """
    Time slots for a doctor on a date

    - **slots**: every start time from the doctor's timetable for that weekday
    - **available_slots**: the slots not overlapping an active booking
    """
    return AppointmentService.get_slot_overview(db, doctor_id, target_date)

@router.get("/doctor/{doctor_id}", response_model=List[AppointmentResponse])
def get_doctor_appointments(doctor_id: str, db: Session = Depends(get_db)):
    """Get all appointments for a specific doctor"""
    return AppointmentService.get_appointments_by_doctor(db, doctor_id)

@router.get("/patient/{patient_id}", response_model=List[AppointmentResponse])
def get_patient_appointments(
    patient_id: str,
    upcoming_only: bool = Query(False),
    db: Session = Depends(get_db)
):
    return AppointmentService.get_appointments_by_patient(db, patient_id, upcoming_only=upcoming_only)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(appointment_id: int, db: Session = Depends(get_db)):
    """Get appointment by ID"""
    return AppointmentService.get_appointment_by_id(db, appointment_id)

@router.post("/{appointment_id}/accept", response_model=AppointmentResponse)
def accept_appointment(appointment_id: int, db: Session = Depends(get_db)):
    return AppointmentService.accept(db, appointment_id)

@router.post("/{appointment_id}/decline", response_model=AppointmentResponse)
def decline_appointment(appointment_id: int, payload: DeclineRequest, db: Session = Depends(get_db)):
    """Decline with a required reason and an optional suggested time"""
    return AppointmentService.decline(db, appointment_id, payload.reason, payload.suggested_time)

@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    return AppointmentService.complete(db, appointment_id)

@router.post("/{appointment_id}/transition", response_model=AppointmentResponse)
def transition_appointment(appointment_id: int, payload: TransitionRequest, db: Session = Depends(get_db)):
    """Apply accept, decline or complete"""
    return AppointmentService.transition_appointment(
        db, appointment_id, payload.action, payload.reason, payload.suggested_time
    )
