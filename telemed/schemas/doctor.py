from pydantic import BaseModel, Field
from typing import Optional

class DoctorBase(BaseModel):
    doctor_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    specialization: Optional[str] = "General Medicine"
    consultation_fee: float = Field(0, ge=0)
    is_verified: bool = False
    hospital_id: Optional[int] = None

class DoctorCreate(DoctorBase):
    pass

class DoctorResponse(DoctorBase):
    id: int

    class Config:
        from_attributes = True
