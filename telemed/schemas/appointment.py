from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Optional, List
from telemed.models.appointment import AppointmentStatus, ConsultationType

class AppointmentBase(BaseModel):
    patient_id: str = Field(..., min_length=1, max_length=50)
    doctor_id: str = Field(..., min_length=1, max_length=50)
    appointment_date: datetime = Field(..., description="Start of the appointment, clinic local time")
    duration_minutes: int = Field(30, ge=15, le=240)
    consultation_type: ConsultationType = ConsultationType.VIDEO
    symptoms: Optional[str] = Field(None, max_length=2000)
    notes: Optional[str] = Field(None, max_length=500)

class AppointmentCreate(AppointmentBase):
    pass

class AppointmentResponse(AppointmentBase):
    id: int
    status: AppointmentStatus
    is_conversation: bool = False
    suggested_time: Optional[datetime] = None
    fee: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class DeclineRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
    suggested_time: Optional[datetime] = None

class TransitionRequest(BaseModel):
    action: str = Field(..., description="accept, decline or complete")
    reason: Optional[str] = Field(None, max_length=500)
    suggested_time: Optional[datetime] = None

class SlotsResponse(BaseModel):
    doctor_id: str
    date: date
    day_of_week: int
    slots: List[str]
    available_slots: List[str]
