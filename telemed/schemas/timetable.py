from pydantic import BaseModel, Field, model_validator
from datetime import time
from typing import Optional

class TimetableBase(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="Monday=0 .. Sunday=6")
    start_time: time = Field(..., description="Format: HH:MM")
    end_time: time = Field(..., description="Format: HH:MM")
    location: Optional[str] = Field(None, max_length=200)
    is_available: bool = True

    @model_validator(mode="after")
    def check_window(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

class TimetableCreate(TimetableBase):
    pass

class TimetableUpdate(BaseModel):
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=200)
    is_available: Optional[bool] = None

class TimetableResponse(TimetableBase):
    id: int
    doctor_id: str

    class Config:
        from_attributes = True
