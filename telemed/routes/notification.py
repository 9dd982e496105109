from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from telemed.config.database import get_db
from telemed.schemas.notification import NotificationResponse
from telemed.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])

@router.get("/user/{user_id}", response_model=List[NotificationResponse])
def get_notifications(
    user_id: str,
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db)
):
    """Newest first"""
    return NotificationService.get_for_user(db, user_id, unread_only, limit)

@router.patch("/user/{user_id}/read-all")
def mark_all_read(user_id: str, db: Session = Depends(get_db)):
    return NotificationService.mark_all_read(db, user_id)

@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(notification_id: int, db: Session = Depends(get_db)):
    return NotificationService.mark_read(db, notification_id)
