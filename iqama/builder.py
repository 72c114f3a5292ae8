"""Build a timetable of Athan and Iqama times over a date range."""

import csv
import datetime
import io
import logging

from iqama.calculator import calculate_iqama
from iqama.models import IQAMA_PRAYERS, PRAYER_NAMES, ROW_HEADER, DayRecord, DayRow
from iqama.prayer_api import fetch_athan_times
from iqama.time_helpers import format_time

# Prayers whose Iqama may count back from a later event
END_PRAYERS = {"fajr": "sunrise"}


def weekly_batches(day_records: list, change_on_weekday: int) -> list:
    """
    Split consecutive days into weeks that start on change_on_weekday.

    The first batch starts at the first day whatever its weekday; each later
    batch starts on the change day and runs up to the day before the next
    one, or to the last day. Returns lists of indexes into day_records.
    """
    batches = []
    current = []
    for index, record in enumerate(day_records):
        if record.date.weekday() == change_on_weekday and current:
            batches.append(current)
            current = []
        current.append(index)
    if current:
        batches.append(current)
    return batches


class Builder:
    """Builds day rows for a location and calculation method."""

    def __init__(self, location, calculation_method, elevation: float = 0, athan_provider=None):
        self.location = location
        self.calculation_method = calculation_method
        self.elevation = elevation
        self.athan_provider = athan_provider or fetch_athan_times
        self.tz = location.tz
        self.logger = logging.getLogger(self.__class__.__name__)

    def build(self, start_date, end_date) -> list:
        """
        Build one DayRow per day from start_date to end_date inclusive.

        Dates may be date or datetime objects (datetimes are first moved into
        the location's timezone) or 'YYYY-MM-DD' strings.
        Raises ValueError if end_date is before start_date, and
        TimeFormatError if a rule holds a malformed time.
        """
        start = self._local_date(start_date)
        end = self._local_date(end_date)
        if end < start:
            raise ValueError(f"End date {end} is before start date {start}")

        days_to_generate = (end - start).days + 1
        day_records = [
            self._day_record(start + datetime.timedelta(days=i))
            for i in range(days_to_generate)
        ]

        rules = self.calculation_method.iqama_calculation_rules
        if rules is not None and rules.uses_weekly():
            batches = weekly_batches(day_records, rules.change_on_weekday)
            mode = "weekly"
        else:
            batches = [list(range(len(day_records)))]
            mode = "daily"
        self.logger.info(
            "Building %s to %s: %d day(s), %s batching in %d batch(es)",
            start, end, days_to_generate, mode, len(batches),
        )

        iqama_times = {name: {} for name in IQAMA_PRAYERS}
        for batch in batches:
            batch_records = {index: day_records[index] for index in batch}
            for name in IQAMA_PRAYERS:
                rule = rules.rule_for(name) if rules is not None else None
                iqama_times[name].update(
                    calculate_iqama(batch_records, name, rule, END_PRAYERS.get(name))
                )

        return [
            self._day_row(record, {name: times.get(index) for name, times in iqama_times.items()})
            for index, record in enumerate(day_records)
        ]

    def build_table(self, start_date, end_date) -> list:
        """Header row followed by one list per day."""
        return [list(ROW_HEADER)] + [row.as_list() for row in self.build(start_date, end_date)]

    def build_associative(self, start_date, end_date) -> list:
        return [row.as_dict() for row in self.build(start_date, end_date)]

    def build_csv(self, start_date, end_date) -> str:
        """The timetable as comma-separated text, header first."""
        out = io.StringIO()
        writer = csv.writer(out, lineterminator="\n")
        writer.writerows(self.build_table(start_date, end_date))
        return out.getvalue()

    def _local_date(self, value) -> datetime.date:
        if isinstance(value, str):
            return datetime.date.fromisoformat(value.strip()[:10])
        if isinstance(value, datetime.datetime):
            if value.tzinfo is not None:
                value = value.astimezone(self.tz)
            return value.date()
        return value

    def _day_record(self, day: datetime.date) -> DayRecord:
        times = self.athan_provider(
            day,
            self.location.latitude,
            self.location.longitude,
            self.elevation,
            self.calculation_method,
            self.calculation_method.high_latitude_adjustment,
        )
        athan = {
            name: self._athan_datetime(day, times[name])
            for name in PRAYER_NAMES
            if times.get(name) is not None
        }
        midnight = self.tz.localize(datetime.datetime.combine(day, datetime.time()))
        return DayRecord(date=midnight, athan=athan)

    def _athan_datetime(self, day: datetime.date, value) -> datetime.datetime:
        """Place a provider time ('HH:MM', 'HH:MM:SS', 'HH:MM (TZ)' or datetime) on day."""
        if isinstance(value, datetime.datetime):
            if value.tzinfo is None:
                return self.tz.localize(value)
            return self.tz.normalize(value.astimezone(self.tz))
        clock = value.split()[0]
        fmt = "%H:%M:%S" if clock.count(":") == 2 else "%H:%M"
        parsed = datetime.datetime.strptime(clock, fmt).time()
        return self.tz.localize(datetime.datetime.combine(day, parsed))

    def _day_row(self, record: DayRecord, iqama: dict) -> DayRow:
        athan = record.athan
        return DayRow(
            date=record.date.strftime("%Y-%m-%d"),
            fajr_athan=format_time(athan.get("fajr")),
            fajr_iqama=format_time(iqama.get("fajr")),
            sunrise=format_time(athan.get("sunrise")),
            dhuhr_athan=format_time(athan.get("dhuhr")),
            dhuhr_iqama=format_time(iqama.get("dhuhr")),
            asr_athan=format_time(athan.get("asr")),
            asr_iqama=format_time(iqama.get("asr")),
            maghrib_athan=format_time(athan.get("maghrib")),
            maghrib_iqama=format_time(iqama.get("maghrib")),
            isha_athan=format_time(athan.get("isha")),
            isha_iqama=format_time(iqama.get("isha")),
        )
