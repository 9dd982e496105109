from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from telemed.config.database import settings
from telemed.models.appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES
from telemed.models.timetable import DoctorTimetable
from telemed.schemas.appointment import AppointmentCreate
from telemed.services.doctor_service import DoctorService, TimetableService
from telemed.services.notification_service import NotificationService
from telemed.services.reminder_service import ReminderService
from telemed.services.persistence import commit_session
from telemed.utils.exceptions import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from telemed.utils.validators import combine_date_time, format_slot, is_blank, to_wall_clock
from datetime import datetime, date, time, timedelta
from typing import Iterable, List, Optional, Tuple
import logging

logger = logging.getLogger("appointments")


def overlaps(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    return start1 < end2 and start2 < end1


def appointment_window(appointment: Appointment) -> Tuple[datetime, datetime]:
    start = appointment.appointment_date
    return start, start + timedelta(minutes=appointment.duration_minutes or 0)


class AppointmentService:
    SLOT_INTERVAL_MINUTES = settings.slot_interval_minutes
    MAX_ALTERNATIVE_SLOTS = settings.max_alternative_slots

    # action -> (statuses it may leave, status it enters)
    TRANSITIONS = {
        "accept": ({AppointmentStatus.PENDING, AppointmentStatus.SCHEDULED}, AppointmentStatus.APPROVED),
        "decline": ({AppointmentStatus.PENDING, AppointmentStatus.SCHEDULED}, AppointmentStatus.CANCELLED),
        "complete": ({AppointmentStatus.APPROVED, AppointmentStatus.CONFIRMED}, AppointmentStatus.COMPLETED),
    }

    # --- slot generation -------------------------------------------------

    @staticmethod
    def generate_time_slots(start_time: time, end_time: time, interval_minutes: Optional[int] = None) -> List[str]:
        interval = timedelta(minutes=interval_minutes or AppointmentService.SLOT_INTERVAL_MINUTES)
        anchor = date(2000, 1, 1)
        current = datetime.combine(anchor, start_time)
        end = datetime.combine(anchor, end_time)

        slots = []
        while current < end:
            slots.append(format_slot(current))
            current += interval

        return slots

    @staticmethod
    def select_day_entry(entries: Iterable[DoctorTimetable], target_date: date) -> Optional[DoctorTimetable]:
        """First available entry for the weekday; later duplicates are ignored"""
        weekday = target_date.weekday()
        for entry in entries:
            if entry.is_available and entry.day_of_week == weekday:
                return entry
        return None

    @staticmethod
    def get_day_entry(db: Session, doctor_id: str, target_date: date) -> Optional[DoctorTimetable]:
        DoctorService.get_doctor_by_id(db, doctor_id)
        entries = TimetableService.get_entries(db, doctor_id, available_only=True)
        return AppointmentService.select_day_entry(entries, target_date)

    @staticmethod
    def generate_slots(db: Session, doctor_id: str, target_date: date) -> List[str]:
        """All candidate start times for the date, bookings not considered"""
        entry = AppointmentService.get_day_entry(db, doctor_id, target_date)
        if entry is None:
            return []

        return AppointmentService.generate_time_slots(entry.start_time, entry.end_time)

    # --- conflict checking -----------------------------------------------

    @staticmethod
    def get_overlapping_appointments(
        db: Session,
        doctor_id: str,
        window_start: datetime,
        window_end: datetime,
        exclude_id: Optional[int] = None
    ) -> List[Appointment]:
        # Anything starting earlier than this cannot reach window_start
        lookback = timedelta(minutes=settings.max_appointment_minutes)

        query = db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.status.in_(ACTIVE_STATUSES),
            Appointment.is_conversation.is_(False),
            Appointment.appointment_date >= window_start - lookback,
            Appointment.appointment_date < window_end
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)

        return [
            apt for apt in query.order_by(Appointment.appointment_date).all()
            if overlaps(window_start, window_end, *appointment_window(apt))
        ]

    @staticmethod
    def find_conflict(
        db: Session,
        doctor_id: str,
        start: datetime,
        duration_minutes: int,
        exclude_id: Optional[int] = None
    ) -> Optional[Appointment]:
        end = start + timedelta(minutes=duration_minutes)
        conflicts = AppointmentService.get_overlapping_appointments(db, doctor_id, start, end, exclude_id)
        return conflicts[0] if conflicts else None

    @staticmethod
    def get_available_slots(
        db: Session,
        doctor_id: str,
        target_date: date,
        duration_minutes: Optional[int] = None
    ) -> List[str]:
        entry = AppointmentService.get_day_entry(db, doctor_id, target_date)
        if entry is None:
            return []

        slots = AppointmentService.generate_time_slots(entry.start_time, entry.end_time)
        duration = timedelta(minutes=duration_minutes or AppointmentService.SLOT_INTERVAL_MINUTES)
        window_end = datetime.combine(target_date, entry.end_time)
        day_start = datetime.combine(target_date, time.min)
        booked = AppointmentService.get_overlapping_appointments(
            db, doctor_id, day_start, day_start + timedelta(days=1) + duration
        )

        available_slots = []
        for slot in slots:
            start = combine_date_time(target_date, slot)
            end = start + duration
            # must finish within the doctor's hours
            if end > window_end:
                continue
            if not any(overlaps(start, end, *appointment_window(apt)) for apt in booked):
                available_slots.append(slot)

        return available_slots

    @staticmethod
    def get_slot_overview(db: Session, doctor_id: str, target_date: date):
        return {
            "doctor_id": doctor_id,
            "date": target_date,
            "day_of_week": target_date.weekday(),
            "slots": AppointmentService.generate_slots(db, doctor_id, target_date),
            "available_slots": AppointmentService.get_available_slots(db, doctor_id, target_date),
        }

    @staticmethod
    def suggest_alternatives(db: Session, doctor_id: str, start: datetime, duration_minutes: int) -> List[str]:
        requested = format_slot(start)
        slots = AppointmentService.get_available_slots(db, doctor_id, start.date(), duration_minutes)
        return [slot for slot in slots if slot != requested][:AppointmentService.MAX_ALTERNATIVE_SLOTS]

    @staticmethod
    def _slot_taken(db: Session, doctor_id: str, start: datetime, duration_minutes: int) -> ConflictError:
        alternatives = AppointmentService.suggest_alternatives(db, doctor_id, start, duration_minutes)
        logger.info(f"Slot {start.isoformat()} for doctor {doctor_id} taken, offering {alternatives}")
        return ConflictError(
            f"Time {format_slot(start)} on {start.strftime('%d/%m/%Y')} is already taken. Please choose another time",
            alternatives=alternatives
        )

    # --- booking -----------------------------------------------------------

    @staticmethod
    def commit_booking(db: Session, appointment_data: AppointmentCreate):
        doctor = DoctorService.get_doctor_by_id(db, appointment_data.doctor_id)
        start = to_wall_clock(appointment_data.appointment_date)
        duration = appointment_data.duration_minutes

        if AppointmentService.find_conflict(db, doctor.doctor_id, start, duration):
            raise AppointmentService._slot_taken(db, doctor.doctor_id, start, duration)

        db_appointment = Appointment(
            **appointment_data.model_dump(exclude={"appointment_date"}),
            appointment_date=start,
            status=AppointmentStatus.PENDING,
            fee=doctor.consultation_fee or 0
        )

        try:
            db.add(db_appointment)
            db.flush()
            NotificationService.add(
                db,
                user_id=doctor.doctor_id,
                title="Appointment Request",
                message=f"Patient {appointment_data.patient_id} requests an appointment on "
                        f"{start.strftime('%d/%m/%Y')} at {format_slot(start)}",
                type="appointment_request",
                related_id=db_appointment.id
            )
            commit_session(db, "book appointment", propagate_integrity=True)
        except IntegrityError:
            db.rollback()
            # Lost the race against a concurrent insert for the same slot
            raise AppointmentService._slot_taken(db, doctor.doctor_id, start, duration)

        db.refresh(db_appointment)
        logger.info(f"Booked appointment {db_appointment.id} with {doctor.doctor_id} at {start.isoformat()}")
        return db_appointment

    # --- queries -------------------------------------------------------------

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: int):
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise NotFoundError(f"Appointment with ID {appointment_id} not found")
        return appointment

    @staticmethod
    def get_appointments_by_doctor(db: Session, doctor_id: str, status: Optional[AppointmentStatus] = None):
        query = db.query(Appointment).filter(Appointment.doctor_id == doctor_id)
        if status is not None:
            query = query.filter(Appointment.status == status)
        return query.order_by(Appointment.appointment_date).all()

    @staticmethod
    def get_appointments_by_patient(
        db: Session,
        patient_id: str,
        upcoming_only: bool = False,
        now: Optional[datetime] = None,
        limit: int = 100
    ):
        query = db.query(Appointment).filter(Appointment.patient_id == patient_id)
        if upcoming_only:
            query = query.filter(Appointment.appointment_date >= (now or datetime.now()))
        return query.order_by(Appointment.appointment_date).limit(limit).all()

    # --- lifecycle -------------------------------------------------------------

    @staticmethod
    def _ensure_transition(appointment: Appointment, action: str) -> AppointmentStatus:
        allowed, target = AppointmentService.TRANSITIONS[action]
        if appointment.status not in allowed:
            raise InvalidTransitionError(
                f"Cannot {action} appointment {appointment.id} while it is {appointment.status.value}"
            )
        return target

    @staticmethod
    def accept(db: Session, appointment_id: int):
        appointment = AppointmentService.get_appointment_by_id(db, appointment_id)
        target = AppointmentService._ensure_transition(appointment, "accept")

        if not appointment.is_conversation:
            conflict = AppointmentService.find_conflict(
                db,
                appointment.doctor_id,
                appointment.appointment_date,
                appointment.duration_minutes,
                exclude_id=appointment.id
            )
            if conflict:
                raise ConflictError(
                    f"You already have appointment {conflict.id} at "
                    f"{format_slot(conflict.appointment_date)} overlapping this request"
                )

        appointment.status = target
        NotificationService.add(
            db,
            user_id=appointment.patient_id,
            title="Appointment Updated",
            message=f"Your appointment on {appointment.appointment_date.strftime('%d/%m/%Y %H:%M')} was approved",
            type="appointment",
            related_id=appointment.id
        )
        ReminderService.schedule_for(db, appointment)
        commit_session(db, "accept appointment")
        db.refresh(appointment)
        logger.info(f"Appointment {appointment.id} approved")
        return appointment

    @staticmethod
    def decline(db: Session, appointment_id: int, reason: Optional[str], suggested_time: Optional[datetime] = None):
        if is_blank(reason):
            raise ValidationError("A reason is required to decline an appointment")

        appointment = AppointmentService.get_appointment_by_id(db, appointment_id)
        target = AppointmentService._ensure_transition(appointment, "decline")
        suggested_time = to_wall_clock(suggested_time)

        appointment.status = target
        appointment.notes = reason.strip()
        appointment.suggested_time = suggested_time

        message = f"Your appointment on {appointment.appointment_date.strftime('%d/%m/%Y %H:%M')} was declined: {reason.strip()}"
        if suggested_time:
            message += f". Suggested time: {suggested_time.strftime('%d/%m/%Y %H:%M')}"

        NotificationService.add(
            db,
            user_id=appointment.patient_id,
            title="Appointment Updated",
            message=message,
            type="appointment",
            related_id=appointment.id
        )
        commit_session(db, "decline appointment")
        db.refresh(appointment)
        logger.info(f"Appointment {appointment.id} declined")
        return appointment

    @staticmethod
    def complete(db: Session, appointment_id: int):
        appointment = AppointmentService.get_appointment_by_id(db, appointment_id)
        appointment.status = AppointmentService._ensure_transition(appointment, "complete")

        NotificationService.add(
            db,
            user_id=appointment.patient_id,
            title="Appointment Completed",
            message=f"Your appointment on {appointment.appointment_date.strftime('%d/%m/%Y %H:%M')} is complete",
            type="appointment",
            related_id=appointment.id
        )
        commit_session(db, "complete appointment")
        db.refresh(appointment)
        return appointment

    @staticmethod
    def transition_appointment(
        db: Session,
        appointment_id: int,
        action: str,
        reason: Optional[str] = None,
        suggested_time: Optional[datetime] = None
    ):
        handlers = {
            "accept": lambda: AppointmentService.accept(db, appointment_id),
            "decline": lambda: AppointmentService.decline(db, appointment_id, reason, suggested_time),
            "complete": lambda: AppointmentService.complete(db, appointment_id),
        }
        handler = handlers.get((action or "").strip().lower())
        if handler is None:
            raise ValidationError(f"Unknown action '{action}'. Use one of: {', '.join(handlers)}")
        return handler()
