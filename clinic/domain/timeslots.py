# Naive clinic-local time helpers. No timezone or DST handling.
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional

from ..exceptions import InvalidDate, ValidationError

TIME_FORMAT = "%H:%M"
DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True, order=True)
class Slot:
    """A bookable (date, time) pair. Derived on demand, never stored."""
    date: date
    time: str


def parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), DATE_FORMAT).date()
    except ValueError:
        raise InvalidDate(f"Invalid date '{value}'. Use YYYY-MM-DD")


def parse_time(value: str) -> datetime:
    try:
        return datetime.strptime(str(value).strip(), TIME_FORMAT)
    except ValueError:
        raise ValidationError(f"Invalid time '{value}'. Use HH:MM format (e.g., 09:30)")


def normalize_time(value: str) -> str:
    """'9:00' -> '09:00'; also strips seconds from 'HH:MM:SS' values."""
    text = str(value).strip()
    if text.count(":") == 2:
        text = text.rsplit(":", 1)[0]
    return parse_time(text).strftime(TIME_FORMAT)


def to_minutes(value: str) -> int:
    t = parse_time(value)
    return t.hour * 60 + t.minute


def day_of_week(d: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (d.weekday() + 1) % 7


def check_on_grid(value: str, slot_minutes: int) -> str:
    time_str = normalize_time(value)
    if to_minutes(time_str) % slot_minutes != 0:
        raise ValidationError(
            f"Appointment time must fall on a {slot_minutes}-minute boundary. Invalid time: {value}"
        )
    return time_str


def generate_slots(start_time: str, end_time: str, slot_minutes: int,
                   break_start: Optional[str] = None, break_end: Optional[str] = None) -> List[str]:
    """Slot starts across [start, end); a trailing partial slot is dropped."""
    start = parse_time(start_time)
    end = parse_time(end_time)
    step = timedelta(minutes=slot_minutes)
    b_start = parse_time(break_start) if break_start and break_end else None
    b_end = parse_time(break_end) if break_start and break_end else None

    slots = []
    current = start
    while current + step <= end:
        in_break = b_start is not None and b_start <= current < b_end
        if not in_break:
            slots.append(current.strftime(TIME_FORMAT))
        current += step
    return slots
