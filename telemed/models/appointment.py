from sqlalchemy import Column, Integer, String, DateTime, Float, Text, Boolean, ForeignKey, Index, text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from telemed.config.database import Base

class AppointmentStatus(enum.Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    APPROVED = "approved"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

class ConsultationType(enum.Enum):
    VIDEO = "video"
    AUDIO = "audio"
    CHAT = "chat"
    IN_PERSON = "in-person"

# Statuses that hold a doctor's time
ACTIVE_STATUSES = (
    AppointmentStatus.PENDING,
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.APPROVED,
    AppointmentStatus.CONFIRMED,
)

_ACTIVE_SLOT_CLAUSE = text(
    "status IN ('pending', 'scheduled', 'approved', 'confirmed') "
    "AND NOT is_conversation"
)


def _enum_values(enum_cls):
    return [m.value for m in enum_cls]


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            "uq_appointments_active_slot",
            "doctor_id",
            "appointment_date",
            unique=True,
            sqlite_where=_ACTIVE_SLOT_CLAUSE,
            postgresql_where=_ACTIVE_SLOT_CLAUSE,
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    patient_id = Column(String(50), nullable=False, index=True)
    doctor_id = Column(String(50), ForeignKey("doctors.doctor_id"), nullable=False, index=True)
    appointment_date = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=30)
    is_conversation = Column(Boolean, default=False, nullable=False)  # chat thread handle, holds no slot
    consultation_type = Column(
        SAEnum(ConsultationType, name="consultationtype", values_callable=_enum_values),
        nullable=False,
        default=ConsultationType.VIDEO
    )
    status = Column(
        SAEnum(AppointmentStatus, name="appointmentstatus", values_callable=_enum_values),
        nullable=False,
        default=AppointmentStatus.PENDING
    )
    symptoms = Column(Text)
    notes = Column(String(500))
    suggested_time = Column(DateTime)
    fee = Column(Float, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    doctor = relationship("Doctor")
    messages = relationship("ChatMessage", back_populates="appointment", order_by="ChatMessage.created_at")
    reminders = relationship("AppointmentReminder", back_populates="appointment")

    def __repr__(self):
        return f"<Appointment {self.patient_id} with {self.doctor_id} on {self.appointment_date}>"
