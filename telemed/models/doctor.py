from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from telemed.config.database import Base

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    specialization = Column(String(100), default="General Medicine")
    consultation_fee = Column(Float, default=0)
    is_verified = Column(Boolean, default=False)
    hospital_id = Column(Integer, ForeignKey("hospitals.id"), nullable=True)

    hospital = relationship("Hospital", back_populates="doctors")
    timetable = relationship(
        "DoctorTimetable",
        back_populates="doctor",
        order_by="DoctorTimetable.day_of_week"
    )
