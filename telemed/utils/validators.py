from datetime import datetime, date, time
from typing import Optional


def parse_time_str(time_str: str) -> time:
    # "09:00" -> time(9, 0)
    return datetime.strptime(time_str.strip(), "%H:%M").time()


def format_slot(value) -> str:
    return value.strftime("%H:%M")


def combine_date_time(day: date, slot: str) -> datetime:
    return datetime.combine(day, parse_time_str(slot))


def to_wall_clock(value: Optional[datetime]) -> Optional[datetime]:
    """Appointments are stored as naive clinic-local wall-clock times"""
    if value is None:
        return None
    return value.replace(tzinfo=None)


def is_blank(text: Optional[str]) -> bool:
    return text is None or not text.strip()


def sanitize_text(text: str, max_length: int = 500) -> str:
    """Collapse whitespace and cap length of free-text input"""
    cleaned = ' '.join(text.split())
    return cleaned[:max_length]
