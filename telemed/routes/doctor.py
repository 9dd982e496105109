from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from telemed.config.database import get_db
from telemed.schemas.doctor import DoctorCreate, DoctorResponse
from telemed.schemas.timetable import TimetableCreate, TimetableUpdate, TimetableResponse
from telemed.services.doctor_service import DoctorService, TimetableService

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.post(
    "/",
    response_model=DoctorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new doctor",
    responses={
        201: {
            "description": "Doctor created successfully",
            "content": {
                "application/json": {
                    "example": {
                        "id": 1,
                        "doctor_id": "DOC001",
                        "name": "Dr. Amina Mushi",
                        "specialization": "Cardiology",
                        "consultation_fee": 25000,
                        "is_verified": True,
                        "hospital_id": None
                    }
                }
            }
        },
        400: {"description": "Doctor ID already exists"}
    }
)
def create_doctor(doctor: DoctorCreate, db: Session = Depends(get_db)):
    return DoctorService.create_doctor(db, doctor)

@router.get("/", response_model=List[DoctorResponse], summary="Get all doctors")
def get_all_doctors(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=100, description="Maximum number of records to return"),
    verified_only: bool = Query(False),
    db: Session = Depends(get_db)
):
    return DoctorService.get_all_doctors(db, skip, limit, verified_only)

@router.put("/timetable/{entry_id}", response_model=TimetableResponse, summary="Update a timetable entry")
def update_timetable_entry(entry_id: int, entry: TimetableUpdate, db: Session = Depends(get_db)):
    """Only provided fields will be updated"""
    return TimetableService.update_entry(db, entry_id, entry)

@router.delete("/timetable/{entry_id}", summary="Delete a timetable entry")
def delete_timetable_entry(entry_id: int, db: Session = Depends(get_db)):
    return TimetableService.delete_entry(db, entry_id)

@router.get("/{doctor_id}", response_model=DoctorResponse, summary="Get doctor by ID")
def get_doctor(doctor_id: str, db: Session = Depends(get_db)):
    return DoctorService.get_doctor_by_id(db, doctor_id)

@router.post(
    "/{doctor_id}/timetable",
    response_model=TimetableResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a weekly availability window",
    description="day_of_week runs Monday=0 .. Sunday=6. Several windows per day are allowed; slots come from the first one"
)
def create_timetable_entry(doctor_id: str, entry: TimetableCreate, db: Session = Depends(get_db)):
    return TimetableService.create_entry(db, doctor_id, entry)

@router.get("/{doctor_id}/timetable", response_model=List[TimetableResponse], summary="Get a doctor's timetable")
def get_timetable(
    doctor_id: str,
    available_only: bool = Query(False),
    db: Session = Depends(get_db)
):
    DoctorService.get_doctor_by_id(db, doctor_id)
    return TimetableService.get_entries(db, doctor_id, available_only)
