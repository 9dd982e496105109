from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from telemed.config.database import get_db
from telemed.services.reminder_service import ReminderService

router = APIRouter(prefix="/reminders", tags=["Reminders"])

@router.post("/dispatch")
def dispatch_reminders(db: Session = Depends(get_db)):
    """Send due 24-hour and 1-hour reminders. Meant to be called by a scheduler every few minutes"""
    return ReminderService.dispatch_due(db)
