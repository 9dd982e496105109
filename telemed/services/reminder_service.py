from sqlalchemy.orm import Session
from telemed.models.appointment import Appointment, AppointmentStatus
from telemed.models.reminder import AppointmentReminder
from telemed.services.notification_service import NotificationService
from telemed.services.persistence import commit_session
from datetime import datetime, timedelta
from typing import Optional
import logging

logger = logging.getLogger("reminders")

class ReminderService:
    # reminder_type -> (lead time before the appointment, send tolerance)
    REMINDER_WINDOWS = {
        "24_hours": (timedelta(hours=24), timedelta(minutes=30)),
        "1_hour": (timedelta(hours=1), timedelta(minutes=5)),
    }
    REMINDER_TITLES = {
        "24_hours": "Appointment Tomorrow",
        "1_hour": "Appointment Soon",
    }

    @staticmethod
    def schedule_for(db: Session, appointment: Appointment):
        """Stage one pending reminder per type, no commit"""
        reminders = []
        for reminder_type in ReminderService.REMINDER_WINDOWS:
            reminder = AppointmentReminder(appointment_id=appointment.id, reminder_type=reminder_type)
            db.add(reminder)
            reminders.append(reminder)
        return reminders

    @staticmethod
    def is_due(reminder_type: str, appointment_date: datetime, now: datetime) -> bool:
        lead, tolerance = ReminderService.REMINDER_WINDOWS[reminder_type]
        return abs(appointment_date - (now + lead)) < tolerance

    @staticmethod
    def build_message(reminder_type: str, appointment: Appointment) -> str:
        doctor_name = appointment.doctor.name if appointment.doctor else "your doctor"
        if reminder_type == "24_hours":
            return f"Reminder: You have an appointment with {doctor_name} tomorrow at {appointment.appointment_date.strftime('%H:%M')}"
        return f"Reminder: Your appointment with {doctor_name} is in 1 hour!"

    @staticmethod
    def dispatch_due(db: Session, now: Optional[datetime] = None):
        now = now or datetime.now()

        pending = db.query(AppointmentReminder).filter(
            AppointmentReminder.status == "pending",
            AppointmentReminder.sent_at.is_(None)
        ).all()
        logger.info(f"Found {len(pending)} pending reminders")

        sent = 0
        for reminder in pending:
            appointment = reminder.appointment
            if appointment is None or appointment.status not in (AppointmentStatus.APPROVED, AppointmentStatus.CONFIRMED):
                continue
            if reminder.reminder_type not in ReminderService.REMINDER_WINDOWS:
                continue
            if not ReminderService.is_due(reminder.reminder_type, appointment.appointment_date, now):
                continue

            NotificationService.add(
                db,
                user_id=appointment.patient_id,
                title=ReminderService.REMINDER_TITLES[reminder.reminder_type],
                message=ReminderService.build_message(reminder.reminder_type, appointment),
                type="appointment_reminder",
                related_id=appointment.id
            )
            reminder.status = "sent"
            reminder.sent_at = now
            sent += 1
            logger.info(f"Sending {reminder.reminder_type} reminder for appointment {appointment.id}")

        commit_session(db, "dispatch reminders")
        return {"processed": len(pending), "sent": sent}
