from sqlalchemy.orm import Session
from telemed.models.doctor import Doctor
from telemed.models.organization import Hospital, Pharmacy, Laboratory
from telemed.services.appointment_service import AppointmentService
from telemed.services.doctor_service import DoctorService
from telemed.utils.intent_mapper import (
    Intent,
    extract_intent_from_text,
    extract_name_words,
    extract_specialization_from_text,
)
from telemed.utils.validators import sanitize_text
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger("chatbot")

RESULT_LIMIT = 10
FALLBACK_SUGGESTIONS = ["Find a doctor", "Hospitals", "Pharmacies", "Laboratories", "My appointments"]


def _reply(intent: Intent, message: str, items: Optional[List[Any]] = None, suggestions: Optional[List[str]] = None):
    return {
        "intent": intent.value,
        "message": message,
        "items": items or [],
        "suggestions": suggestions or [],
    }


def _doctor_item(doctor: Doctor) -> Dict[str, Any]:
    return {
        "doctor_id": doctor.doctor_id,
        "name": doctor.name,
        "specialization": doctor.specialization,
        "consultation_fee": doctor.consultation_fee,
    }


def _organization_item(organization) -> Dict[str, Any]:
    return {
        "id": organization.id,
        "name": organization.name,
        "location": organization.location,
        "phone": organization.phone,
    }


def _chat_doctor(db: Session, text: str, user_id: Optional[str], now: datetime):
    doctors = DoctorService.get_all_doctors(db, limit=RESULT_LIMIT, verified_only=True)
    return _reply(
        Intent.CHAT_DOCTOR,
        "Choose the doctor you want to talk to:",
        [_doctor_item(d) for d in doctors]
    )


def _find_doctor(db: Session, text: str, user_id: Optional[str], now: datetime):
    doctors = DoctorService.get_all_doctors(db, limit=1000, verified_only=True)

    words = extract_name_words(text)
    if words:
        by_name = [d for d in doctors if any(w in d.name.lower() for w in words)]
        if len(by_name) > RESULT_LIMIT:
            return _reply(
                Intent.FIND_DOCTOR,
                f"Found {len(by_name)} doctors with that name. Narrow down by hospital?",
                [_doctor_item(d) for d in by_name[:RESULT_LIMIT]],
                ["Show all", "Choose hospital"]
            )
        if by_name:
            return _reply(
                Intent.FIND_DOCTOR,
                f"Found {len(by_name)} doctor(s):",
                [_doctor_item(d) for d in by_name]
            )

    specialization = extract_specialization_from_text(text)
    if specialization:
        specialists = [d for d in doctors if (d.specialization or "").lower() == specialization.lower()]
        if specialists:
            return _reply(
                Intent.FIND_DOCTOR,
                f"{specialization} doctors available:",
                [_doctor_item(d) for d in specialists[:RESULT_LIMIT]]
            )

    if not doctors:
        return _reply(Intent.FIND_DOCTOR, "No verified doctors are available right now.")
    return _reply(
        Intent.FIND_DOCTOR,
        f"{min(len(doctors), RESULT_LIMIT)} doctors available:",
        [_doctor_item(d) for d in doctors[:RESULT_LIMIT]]
    )


def _organizations(intent: Intent, model, label: str):
    def handler(db: Session, text: str, user_id: Optional[str], now: datetime):
        rows = db.query(model).filter(model.is_verified.is_(True)).order_by(model.id).limit(RESULT_LIMIT).all()
        if not rows:
            return _reply(intent, f"No {label} found.")
        return _reply(intent, f"{len(rows)} {label}:", [_organization_item(r) for r in rows])
    return handler


def _my_appointments(db: Session, text: str, user_id: Optional[str], now: datetime):
    if not user_id:
        return _reply(Intent.MY_APPOINTMENTS, "Sign in to see your appointments.")

    appointments = AppointmentService.get_appointments_by_patient(
        db, user_id, upcoming_only=True, now=now, limit=RESULT_LIMIT
    )
    if not appointments:
        return _reply(
            Intent.MY_APPOINTMENTS,
            "You have no upcoming appointments. Find a doctor to book one.",
            suggestions=["Find a doctor"]
        )
    return _reply(
        Intent.MY_APPOINTMENTS,
        f"You have {len(appointments)} upcoming appointment(s):",
        [
            {
                "id": apt.id,
                "doctor_id": apt.doctor_id,
                "appointment_date": apt.appointment_date.isoformat(),
                "status": apt.status.value,
                "consultation_type": apt.consultation_type.value,
            }
            for apt in appointments
        ]
    )


INTENT_HANDLERS = {
    Intent.CHAT_DOCTOR: _chat_doctor,
    Intent.FIND_DOCTOR: _find_doctor,
    Intent.HOSPITALS: _organizations(Intent.HOSPITALS, Hospital, "hospitals"),
    Intent.PHARMACIES: _organizations(Intent.PHARMACIES, Pharmacy, "pharmacies"),
    Intent.LABS: _organizations(Intent.LABS, Laboratory, "laboratories"),
    Intent.MY_APPOINTMENTS: _my_appointments,
}


class ChatbotService:
    @staticmethod
    def handle_message(db: Session, text: str, user_id: Optional[str] = None, now: Optional[datetime] = None):
        text = sanitize_text(text or "", max_length=1000)
        intent = extract_intent_from_text(text)
        handler = INTENT_HANDLERS.get(intent)
        if handler is None:
            return _reply(
                Intent.UNKNOWN,
                "I did not understand that. Try one of these:",
                suggestions=FALLBACK_SUGGESTIONS
            )

        logger.info(f"Chatbot intent {intent.value} for user {user_id}")
        return handler(db, text, user_id, now or datetime.now())
