"""Gregorian to Hijri (Umm al-Qura) conversion and Ramadan detection."""

import datetime
from typing import NamedTuple

from hijridate import Gregorian

RAMADAN = 9


class HijriDate(NamedTuple):
    day: int
    month: int
    year: int
    month_name: str = ""


def _calendar_date(value) -> datetime.date:
    # Only the calendar date matters; the time of day and zone are ignored.
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, str):
        return datetime.date.fromisoformat(value[:10])
    return value


def convert_to_hijri(gregorian_date, day_offset: int = 0) -> HijriDate:
    """
    Convert a Gregorian date to its Umm al-Qura Hijri date.

    gregorian_date may be a date, a datetime or an ISO 'YYYY-MM-DD' string.
    day_offset shifts the Gregorian date first, to follow a local moon
    sighting that runs a day ahead of or behind the table.
    Raises ValueError for dates outside the Umm al-Qura table.
    """
    day = _calendar_date(gregorian_date) + datetime.timedelta(days=day_offset)
    try:
        hijri = Gregorian.fromdate(day).to_hijri()
    except OverflowError as exc:
        raise ValueError(f"Date outside the Umm al-Qura range: {day.isoformat()}") from exc
    return HijriDate(
        day=hijri.day,
        month=hijri.month,
        year=hijri.year,
        month_name=hijri.month_name(),
    )


def is_ramadan(gregorian_date, day_offset: int = 0) -> bool:
    """Return True if the date falls in the month of Ramadan."""
    return convert_to_hijri(gregorian_date, day_offset).month == RAMADAN
