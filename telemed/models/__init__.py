from telemed.models.organization import Hospital, Pharmacy, Laboratory
from telemed.models.doctor import Doctor
from telemed.models.timetable import DoctorTimetable
from telemed.models.appointment import Appointment
from telemed.models.notification import Notification
from telemed.models.chat_message import ChatMessage
from telemed.models.reminder import AppointmentReminder

__all__ = [
    "Hospital", "Pharmacy", "Laboratory", "Doctor", "DoctorTimetable",
    "Appointment", "Notification", "ChatMessage", "AppointmentReminder"
]
