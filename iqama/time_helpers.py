"""Clock arithmetic for prayer times, with daylight-saving normalization."""

import datetime
import re

TIME_PATTERN = re.compile(r"([01][0-9]|2[0-3]):([0-5][0-9])")

ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")


class TimeFormatError(ValueError):
    """Raised when a configured clock time is not a valid 'HH:MM' string."""


def is_dst(t: datetime.datetime) -> bool:
    """Return True if the zone-aware time t falls under daylight-saving time."""
    if getattr(t, "tzinfo", None) is None:
        return False
    return bool(t.dst())


def _localize(t: datetime.datetime, naive: datetime.datetime) -> datetime.datetime:
    """Attach t's zone to a naive wall-clock time, resolving the right UTC offset."""
    tz = t.tzinfo
    if tz is None:
        return naive
    if hasattr(tz, "localize"):
        # pytz zones must go through localize() to pick the offset for that date
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


def _shift(t: datetime.datetime, minutes: int) -> datetime.datetime:
    """Move t by a number of elapsed minutes, keeping the zone's offset correct."""
    shifted = t + datetime.timedelta(minutes=minutes)
    if hasattr(t.tzinfo, "normalize"):
        return t.tzinfo.normalize(shifted)
    return shifted


def add_minutes(t: datetime.datetime, minutes: int) -> datetime.datetime:
    return _shift(t, minutes)


def with_date(t: datetime.datetime, day) -> datetime.datetime:
    """Return t's wall-clock time placed on another calendar day, in t's zone."""
    naive = t.replace(tzinfo=None).replace(year=day.year, month=day.month, day=day.day)
    return _localize(t, naive)


def time_to_minutes(t: datetime.datetime) -> int:
    """
    Minutes since midnight for t.

    An hour is taken off when t is under daylight-saving time, so that
    readings from either side of a transition compare on the same scale.
    """
    minutes = t.hour * 60 + t.minute
    if is_dst(t):
        minutes -= 60
    return minutes


def round_down(t: datetime.datetime, interval: int = 1) -> datetime.datetime:
    """Round t down to a multiple of interval minutes, zeroing the seconds."""
    if interval is None or interval <= 1:
        return t
    minute = t.minute - (t.minute % interval)
    naive = t.replace(tzinfo=None, minute=minute, second=0, microsecond=0)
    return _localize(t, naive)


def round_up(t: datetime.datetime, interval: int = 1) -> datetime.datetime:
    """
    Round t up to a multiple of interval minutes, zeroing the seconds.

    A minute already on a multiple stays where it is. Rounding past :59
    carries into the next hour.
    """
    if interval is None or interval <= 1:
        return t
    remainder = t.minute % interval
    minute = t.minute if remainder == 0 else t.minute + interval - remainder
    naive = t.replace(tzinfo=None, minute=0, second=0, microsecond=0)
    naive += datetime.timedelta(minutes=minute)
    return _localize(t, naive)


def normalize_time_for_dst(t: datetime.datetime) -> datetime.datetime:
    """Take an hour off t if it is under daylight-saving time."""
    if is_dst(t):
        return _shift(t, -60)
    return t


def denormalize_time_for_dst(t: datetime.datetime) -> datetime.datetime:
    """Give back the hour removed by normalize_time_for_dst()."""
    if is_dst(t):
        return _shift(t, 60)
    return t


def normalize_times_for_dst(day_records: list) -> list:
    """
    Return a copy of day_records with every athan time normalized for DST.

    The records passed in are left untouched.
    """
    return [
        record.with_athan({
            name: normalize_time_for_dst(value)
            for name, value in record.athan.items()
        })
        for record in day_records
    ]


def parse_time_string(reference, time_str: str) -> datetime.datetime:
    """
    Combine the calendar date of reference with an 'HH:MM' clock time.

    reference may be a date or a datetime; a zone-aware datetime lends its
    zone to the result. Raises TimeFormatError for anything but a
    zero-padded 24-hour 'HH:MM'.
    """
    match = TIME_PATTERN.fullmatch(time_str) if isinstance(time_str, str) else None
    if match is None:
        raise TimeFormatError(f"Invalid time format, expected HH:MM: {time_str!r}")
    hour, minute = int(match.group(1)), int(match.group(2))

    if isinstance(reference, datetime.datetime):
        naive = datetime.datetime.combine(reference.date(), datetime.time(hour, minute))
        return _localize(reference, naive)
    return datetime.datetime.combine(reference, datetime.time(hour, minute))


def format_time(t: datetime.datetime, with_seconds: bool = False) -> str:
    if t is None:
        return ""
    return t.strftime("%H:%M:%S" if with_seconds else "%H:%M")


def convert_to_arabic_numerals(value) -> str:
    """Replace ASCII digits with Arabic-Indic digits, e.g. '05:30' -> '٠٥:٣٠'."""
    return str(value).translate(ARABIC_DIGITS)
