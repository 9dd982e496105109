from sqlalchemy.orm import Session
from telemed.models.notification import Notification
from telemed.services.persistence import commit_session
from telemed.utils.exceptions import NotFoundError
from typing import Optional

class NotificationService:
    @staticmethod
    def add(db: Session, user_id: str, title: str, message: str, type: str, related_id: Optional[int] = None):
        """Stage a notification in the caller's unit of work, no commit"""
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            related_id=related_id
        )
        db.add(notification)
        return notification

    @staticmethod
    def get_for_user(db: Session, user_id: str, unread_only: bool = False, limit: int = 50):
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    @staticmethod
    def mark_read(db: Session, notification_id: int):
        notification = db.query(Notification).filter(Notification.id == notification_id).first()
        if not notification:
            raise NotFoundError(f"Notification {notification_id} not found")
        notification.is_read = True
        commit_session(db, "mark notification read")
        db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_read(db: Session, user_id: str):
        updated = db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read.is_(False)
        ).update({"is_read": True}, synchronize_session=False)
        commit_session(db, "mark notifications read")
        return {"user_id": user_id, "updated": updated}
