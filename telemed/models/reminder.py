from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from telemed.config.database import Base

class AppointmentReminder(Base):
    __tablename__ = "appointment_reminders"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False, index=True)
    reminder_type = Column(String(20), nullable=False)  # 24_hours, 1_hour
    status = Column(String(20), default="pending", nullable=False)  # pending, sent
    sent_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)

    appointment = relationship("Appointment", back_populates="reminders")
