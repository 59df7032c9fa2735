"""Spoken-text formatting for times, dates, phone numbers and lists."""

import re
from datetime import date, datetime, time, timedelta

_NON_DIGITS = re.compile(r"\D")


def format_time(value: datetime | time) -> str:
    """12-hour clock without a leading zero: "10:00 AM", "3:05 PM"."""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_date_long(value: datetime | date) -> str:
    """Weekday, month and day: "Friday, October 23"."""
    return f"{value:%A}, {value:%B} {value.day}"


def phone_digits(phone: str | None) -> str:
    """Digits only, with a leading US country code dropped from 11-digit numbers."""
    digits = _NON_DIGITS.sub("", phone or "")
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    return digits


def format_phone(phone: str) -> str:
    """XXX-XXX-XXXX for ten-digit numbers; anything else is spoken as stored."""
    digits = phone_digits(phone)
    if len(digits) != 10:
        return phone
    return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"


def resolve_date_range(
    date_entity: str | None, today: date
) -> tuple[datetime, datetime, str]:
    """Map a spoken date reference onto a [start, end) interval and its label.

    "tomorrow" wins over "week"; anything else means today.
    """
    start = datetime.combine(today, time.min)
    reference = (date_entity or "").lower()
    if "tomorrow" in reference:
        start += timedelta(days=1)
        return start, start + timedelta(days=1), "tomorrow"
    if "week" in reference:
        return start, start + timedelta(days=7), "this week"
    return start, start + timedelta(days=1), "today"


def day_bounds(today: date) -> tuple[datetime, datetime]:
    start = datetime.combine(today, time.min)
    return start, start + timedelta(days=1)


def join_names(names: list[str]) -> str:
    return ", ".join(names)


def time_of_day_greeting(hour: int) -> str:
    if hour < 12:
        return "Good morning"
    if hour < 17:
        return "Good afternoon"
    return "Good evening"
