from datetime import date, datetime, time

MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)


def at(day: date, hhmm: str) -> datetime:
    hours, minutes = hhmm.split(":")
    return datetime.combine(day, time(int(hours), int(minutes)))
