from sqlalchemy.orm import Session
from telemed.models.appointment import Appointment, AppointmentStatus, ConsultationType, ACTIVE_STATUSES
from telemed.models.chat_message import ChatMessage
from telemed.services.appointment_service import AppointmentService
from telemed.services.doctor_service import DoctorService
from telemed.services.persistence import commit_session
from telemed.services.redis_service import redis_service
from telemed.utils.exceptions import ValidationError
from telemed.utils.validators import is_blank
from datetime import datetime
import logging

logger = logging.getLogger("chat")

class ChatService:
    @staticmethod
    def start_conversation(db: Session, patient_id: str, doctor_id: str):
        """Reuse the latest active appointment between the pair as the thread, else open one"""
        DoctorService.get_doctor_by_id(db, doctor_id)

        existing = db.query(Appointment).filter(
            Appointment.patient_id == patient_id,
            Appointment.doctor_id == doctor_id,
            Appointment.status.in_(ACTIVE_STATUSES)
        ).order_by(Appointment.created_at.desc(), Appointment.id.desc()).first()
        if existing:
            return existing

        conversation = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=datetime.now(),
            consultation_type=ConsultationType.CHAT,
            status=AppointmentStatus.SCHEDULED,
            is_conversation=True
        )
        db.add(conversation)
        commit_session(db, "start conversation")
        db.refresh(conversation)
        logger.info(f"Opened conversation {conversation.id} between {patient_id} and {doctor_id}")
        return conversation

    @staticmethod
    def send_message(db: Session, appointment_id: int, sender_id: str, message: str, message_type: str = "text"):
        if is_blank(message):
            raise ValidationError("Message cannot be empty")

        appointment = AppointmentService.get_appointment_by_id(db, appointment_id)
        if sender_id not in (appointment.patient_id, appointment.doctor_id):
            raise ValidationError(f"{sender_id} is not a participant of conversation {appointment_id}")

        chat_message = ChatMessage(
            appointment_id=appointment.id,
            sender_id=sender_id,
            message=message.strip(),
            message_type=message_type
        )
        db.add(chat_message)
        commit_session(db, "send message")
        db.refresh(chat_message)

        redis_service.publish_chat_message(appointment.id, chat_message.to_dict())
        return chat_message

    @staticmethod
    def list_messages(db: Session, appointment_id: int):
        AppointmentService.get_appointment_by_id(db, appointment_id)
        return db.query(ChatMessage).filter(
            ChatMessage.appointment_id == appointment_id
        ).order_by(ChatMessage.created_at, ChatMessage.id).all()

    @staticmethod
    def mark_read(db: Session, appointment_id: int, reader_id: str):
        AppointmentService.get_appointment_by_id(db, appointment_id)
        updated = db.query(ChatMessage).filter(
            ChatMessage.appointment_id == appointment_id,
            ChatMessage.sender_id != reader_id,
            ChatMessage.is_read.is_(False)
        ).update({"is_read": True}, synchronize_session=False)
        commit_session(db, "mark messages read")
        return {"appointment_id": appointment_id, "updated": updated}
