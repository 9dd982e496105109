from sqlalchemy import Column, Integer, String, Time, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from telemed.config.database import Base

class DoctorTimetable(Base):
    """One recurring weekly availability window. day_of_week: Monday=0 .. Sunday=6"""
    __tablename__ = "doctor_timetable"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(String(50), ForeignKey("doctors.doctor_id", ondelete="CASCADE"), index=True, nullable=False)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    location = Column(String(200))
    is_available = Column(Boolean, default=True, nullable=False)

    doctor = relationship("Doctor", back_populates="timetable")
