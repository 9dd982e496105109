from sqlalchemy.orm import Session
from telemed.models.doctor import Doctor
from telemed.models.timetable import DoctorTimetable
from telemed.schemas.doctor import DoctorCreate
from telemed.schemas.timetable import TimetableCreate, TimetableUpdate
from telemed.services.persistence import commit_session
from telemed.utils.exceptions import NotFoundError, ValidationError
from typing import List
import logging

logger = logging.getLogger("doctors")

class DoctorService:
    @staticmethod
    def create_doctor(db: Session, doctor_data: DoctorCreate):
        existing_doctor = db.query(Doctor).filter(Doctor.doctor_id == doctor_data.doctor_id).first()
        if existing_doctor:
            raise ValidationError(f"Doctor with ID {doctor_data.doctor_id} already exists")

        db_doctor = Doctor(**doctor_data.model_dump())
        db.add(db_doctor)
        commit_session(db, "create doctor")
        db.refresh(db_doctor)
        logger.info(f"Registered doctor {db_doctor.doctor_id}")
        return db_doctor

    @staticmethod
    def get_doctor_by_id(db: Session, doctor_id: str):
        doctor = db.query(Doctor).filter(Doctor.doctor_id == doctor_id).first()
        if not doctor:
            raise NotFoundError(f"Doctor with ID {doctor_id} not found")
        return doctor

    @staticmethod
    def get_all_doctors(db: Session, skip: int = 0, limit: int = 100, verified_only: bool = False):
        query = db.query(Doctor)
        if verified_only:
            query = query.filter(Doctor.is_verified.is_(True))
        return query.order_by(Doctor.id).offset(skip).limit(limit).all()


class TimetableService:
    @staticmethod
    def create_entry(db: Session, doctor_id: str, entry_data: TimetableCreate):
        DoctorService.get_doctor_by_id(db, doctor_id)

        entry = DoctorTimetable(doctor_id=doctor_id, **entry_data.model_dump())
        db.add(entry)
        commit_session(db, "create timetable entry")
        db.refresh(entry)
        return entry

    @staticmethod
    def get_entry(db: Session, entry_id: int):
        entry = db.query(DoctorTimetable).filter(DoctorTimetable.id == entry_id).first()
        if not entry:
            raise NotFoundError(f"Timetable entry {entry_id} not found")
        return entry

    @staticmethod
    def get_entries(db: Session, doctor_id: str, available_only: bool = False) -> List[DoctorTimetable]:
        query = db.query(DoctorTimetable).filter(DoctorTimetable.doctor_id == doctor_id)
        if available_only:
            query = query.filter(DoctorTimetable.is_available.is_(True))
        return query.order_by(DoctorTimetable.day_of_week, DoctorTimetable.id).all()

    @staticmethod
    def update_entry(db: Session, entry_id: int, entry_data: TimetableUpdate):
        entry = TimetableService.get_entry(db, entry_id)

        update_data = entry_data.model_dump(exclude_unset=True, exclude_none=True)
        start_time = update_data.get("start_time", entry.start_time)
        end_time = update_data.get("end_time", entry.end_time)
        if start_time >= end_time:
            raise ValidationError("start_time must be before end_time")

        for key, value in update_data.items():
            setattr(entry, key, value)

        commit_session(db, "update timetable entry")
        db.refresh(entry)
        return entry

    @staticmethod
    def delete_entry(db: Session, entry_id: int):
        entry = TimetableService.get_entry(db, entry_id)
        db.delete(entry)
        commit_session(db, "delete timetable entry")
        return {"message": f"Timetable entry {entry_id} deleted successfully"}
