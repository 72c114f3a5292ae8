"""Iqama (congregation) times derived from Athan times by per-prayer rules."""

import logging

from iqama.hijri import is_ramadan
from iqama.models import DST_CONDITION, RAMADAN_CONDITION, STATIC_NONE
from iqama.time_helpers import (
    add_minutes,
    denormalize_time_for_dst,
    is_dst,
    normalize_times_for_dst,
    parse_time_string,
    round_down,
    round_up,
    time_to_minutes,
    with_date,
)

logger = logging.getLogger(__name__)

DEFAULT_ROUND_MINUTES = 1
DEFAULT_EARLIEST = "00:00"
DEFAULT_LATEST = "23:59"


def condition_holds(condition: str, day) -> bool:
    """Check an override condition against a day's local midnight."""
    if condition == DST_CONDITION:
        return is_dst(day)
    if condition == RAMADAN_CONDITION:
        return is_ramadan(day)
    return False


def effective_rule(rule, day):
    """
    Resolve the rule that applies on a given day.

    Overrides are tried in order and the first one whose condition holds
    replaces the base rule outright.
    """
    if rule is None:
        return None
    for override in rule.overrides:
        if condition_holds(override.condition, day):
            return override.time
    return rule


def _indexed(day_records) -> list:
    if isinstance(day_records, dict):
        return list(day_records.items())
    return list(enumerate(day_records))


def _latest_time(records, prayer_name: str):
    """Latest reading of a prayer across records, compared on the DST-normalized scale."""
    latest = None
    for record in records:
        value = record.athan.get(prayer_name)
        if value is None:
            continue
        if latest is None or time_to_minutes(value) > time_to_minutes(latest):
            latest = value
    return latest


def calculate_iqama(day_records, prayer_name: str, rule=None, end_prayer_name: str = None) -> dict:
    """
    Calculate Iqama times for one prayer over a batch of days.

    day_records is a list of DayRecord (keys are list positions) or a dict
    of index -> DayRecord. end_prayer_name names the event a
    before_end_minutes rule counts back from, e.g. 'sunrise' for Fajr.

    Returns {index: datetime} in index order. Days with no Athan time for
    the prayer, or whose rule is static 'none', are left out.
    Raises TimeFormatError if a configured time is not 'HH:MM'.
    """
    if rule is None:
        return {}

    results = {}
    # keyed by rule object, not value: two overrides with equal rules still aggregate apart
    partitions = {}
    for index, record in _indexed(day_records):
        day_rule = effective_rule(rule, record.date)
        if day_rule.static is not None:
            if day_rule.static != STATIC_NONE:
                results[index] = parse_time_string(record.date, day_rule.static)
            continue
        partitions.setdefault(id(day_rule), (day_rule, {}))[1][index] = record

    for day_rule, records in partitions.values():
        logger.debug(
            "%s: evaluating %d day(s) with %s rule",
            prayer_name, len(records), day_rule.change or "daily",
        )
        results.update(_calculate_partition(records, prayer_name, day_rule, end_prayer_name))

    return dict(sorted(results.items()))


def _calculate_partition(records: dict, prayer_name: str, rule, end_prayer_name: str = None) -> dict:
    """Evaluate a set of days that all share the same effective rule."""
    is_weekly = rule.is_weekly
    round_minutes = rule.round_minutes if rule.round_minutes is not None else DEFAULT_ROUND_MINUTES
    after_athan_minutes = rule.after_athan_minutes or 0
    before_end_minutes = rule.before_end_minutes or 0
    earliest = rule.earliest or DEFAULT_EARLIEST
    latest = rule.latest or DEFAULT_LATEST

    indexes = list(records)
    normalized = dict(zip(indexes, normalize_times_for_dst([records[i] for i in indexes])))

    latest_athan = None
    latest_end = None
    if is_weekly:
        latest_athan = _latest_time(normalized.values(), prayer_name)
        if end_prayer_name is not None:
            latest_end = _latest_time(normalized.values(), end_prayer_name)
        if latest_athan is not None:
            latest_athan = round_up(latest_athan, round_minutes)
        if latest_end is not None:
            latest_end = round_down(latest_end, round_minutes)
        logger.debug("%s: weekly athan %s, end %s", prayer_name, latest_athan, latest_end)

    results = {}
    for index, record in normalized.items():
        athan = record.athan.get(prayer_name)
        if athan is None:
            continue

        if is_weekly:
            if before_end_minutes > 0 and latest_end is not None:
                iqama = add_minutes(latest_end, -before_end_minutes)
            else:
                iqama = add_minutes(latest_athan, after_athan_minutes)
            # the shared time belongs to whichever day set it; move it onto this one
            iqama = with_date(iqama, record.date)
        else:
            end_time = record.athan.get(end_prayer_name) if end_prayer_name else None
            if before_end_minutes > 0 and end_time is not None:
                iqama = add_minutes(round_down(end_time, round_minutes), -before_end_minutes)
            else:
                iqama = add_minutes(round_up(athan, round_minutes), after_athan_minutes)

        # earliest/latest are wall-clock bounds, so undo the normalization first
        iqama = denormalize_time_for_dst(iqama)

        min_time = parse_time_string(record.date, earliest)
        max_time = parse_time_string(record.date, latest)
        if iqama < min_time:
            iqama = min_time
        if iqama > max_time:
            iqama = max_time

        results[index] = iqama

    return results
