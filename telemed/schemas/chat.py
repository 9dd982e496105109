from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Any

class ConversationStart(BaseModel):
    patient_id: str = Field(..., min_length=1, max_length=50)
    doctor_id: str = Field(..., min_length=1, max_length=50)

class MessageCreate(BaseModel):
    sender_id: str = Field(..., min_length=1, max_length=50)
    message: str = Field(..., min_length=1, max_length=4000)
    message_type: str = "text"

class MessageResponse(BaseModel):
    id: int
    appointment_id: int
    sender_id: str
    message: str
    message_type: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True

class ChatbotRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)
    user_id: Optional[str] = None

class ChatbotReply(BaseModel):
    intent: str
    message: str
    items: List[Any] = []
    suggestions: List[str] = []
