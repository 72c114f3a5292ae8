"""Value objects describing a location, a calculation method and its Iqama rules."""

import dataclasses
import datetime
from dataclasses import dataclass, field
from typing import Optional

import pytz

PRAYER_NAMES = ["fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha"]
IQAMA_PRAYERS = ["fajr", "dhuhr", "asr", "maghrib", "isha"]

DAILY = "daily"
WEEKLY = "weekly"
CHANGE_VALUES = (DAILY, WEEKLY)

DST_CONDITION = "daylightSavingsTime"
RAMADAN_CONDITION = "ramadan"
OVERRIDE_CONDITIONS = (DST_CONDITION, RAMADAN_CONDITION)

STATIC_NONE = "none"

# datetime.weekday() numbering, Monday = 0
WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
DEFAULT_CHANGE_ON = "friday"


def weekday_number(name: str) -> int:
    """Map a weekday name (any case) to datetime.weekday() numbering."""
    try:
        return WEEKDAYS.index(name.strip().lower())
    except (AttributeError, ValueError):
        raise ValueError(f"Unknown weekday: {name!r}") from None


def _drop_none(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class OverrideRule:
    """Replaces a prayer's rule on the days its condition holds."""

    condition: str
    time: "PrayerCalculationRule"

    def __post_init__(self):
        if self.condition not in OVERRIDE_CONDITIONS:
            raise ValueError(f"Unknown override condition: {self.condition!r}")

    @classmethod
    def from_dict(cls, data: dict) -> "OverrideRule":
        return cls(data.get("condition"), PrayerCalculationRule.from_dict(data.get("time") or {}))

    def to_dict(self) -> dict:
        return {"condition": self.condition, "time": self.time.to_dict()}


@dataclass(frozen=True)
class PrayerCalculationRule:
    """
    How one prayer's Iqama time is derived from its Athan time.

    Unset fields fall back to the calculator defaults: one-minute rounding,
    no offsets, and a 00:00-23:59 window.
    """

    static: Optional[str] = None
    change: Optional[str] = None
    round_minutes: Optional[int] = None
    earliest: Optional[str] = None
    latest: Optional[str] = None
    after_athan_minutes: Optional[int] = None
    before_end_minutes: Optional[int] = None
    overrides: tuple = ()

    def __post_init__(self):
        if self.change is not None and self.change not in CHANGE_VALUES:
            raise ValueError(f"Unknown change frequency: {self.change!r}")
        # accept any iterable of overrides but store a tuple so the rule stays hashable
        object.__setattr__(self, "overrides", tuple(self.overrides or ()))

    @property
    def is_weekly(self) -> bool:
        return self.change == WEEKLY

    def uses_weekly(self) -> bool:
        """True if this rule or any of its overrides aggregates weekly."""
        return self.is_weekly or any(o.time.uses_weekly() for o in self.overrides)

    @classmethod
    def from_dict(cls, data: dict) -> "PrayerCalculationRule":
        return cls(
            static=data.get("static"),
            change=data.get("change"),
            round_minutes=data.get("roundMinutes"),
            earliest=data.get("earliest"),
            latest=data.get("latest"),
            after_athan_minutes=data.get("afterAthanMinutes"),
            before_end_minutes=data.get("beforeEndMinutes"),
            overrides=[OverrideRule.from_dict(o) for o in data.get("overrides") or []],
        )

    def to_dict(self) -> dict:
        data = _drop_none({
            "static": self.static,
            "change": self.change,
            "roundMinutes": self.round_minutes,
            "earliest": self.earliest,
            "latest": self.latest,
            "afterAthanMinutes": self.after_athan_minutes,
            "beforeEndMinutes": self.before_end_minutes,
        })
        if self.overrides:
            data["overrides"] = [o.to_dict() for o in self.overrides]
        return data


@dataclass(frozen=True)
class IqamaCalculationRules:
    change_on: Optional[str] = None
    fajr: Optional[PrayerCalculationRule] = None
    dhuhr: Optional[PrayerCalculationRule] = None
    asr: Optional[PrayerCalculationRule] = None
    maghrib: Optional[PrayerCalculationRule] = None
    isha: Optional[PrayerCalculationRule] = None

    def __post_init__(self):
        if self.change_on is not None:
            weekday_number(self.change_on)

    def rule_for(self, prayer_name: str) -> Optional[PrayerCalculationRule]:
        return getattr(self, prayer_name, None) if prayer_name in IQAMA_PRAYERS else None

    def uses_weekly(self) -> bool:
        """Weekly batching applies when a change day is set or any rule aggregates weekly."""
        if self.change_on is not None:
            return True
        return any(
            rule is not None and rule.uses_weekly()
            for rule in (self.rule_for(name) for name in IQAMA_PRAYERS)
        )

    @property
    def change_on_weekday(self) -> int:
        return weekday_number(self.change_on or DEFAULT_CHANGE_ON)

    @classmethod
    def from_dict(cls, data: dict) -> "IqamaCalculationRules":
        rules = {
            name: PrayerCalculationRule.from_dict(data[name])
            for name in IQAMA_PRAYERS
            if data.get(name) is not None
        }
        return cls(change_on=data.get("changeOn"), **rules)

    def to_dict(self) -> dict:
        data = _drop_none({"changeOn": self.change_on})
        for name in IQAMA_PRAYERS:
            rule = self.rule_for(name)
            if rule is not None:
                data[name] = rule.to_dict()
        return data


@dataclass(frozen=True)
class JumuahLocation:
    name: str
    address: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({"name": self.name, "address": self.address})


@dataclass(frozen=True)
class JumuahRule:
    """A Friday prayer slot. Carried alongside the method, not scheduled here."""

    name: str
    time: PrayerCalculationRule
    location: Optional[JumuahLocation] = None

    @classmethod
    def from_dict(cls, data: dict) -> "JumuahRule":
        location = data.get("location")
        return cls(
            name=data.get("name", ""),
            time=PrayerCalculationRule.from_dict(data.get("time") or {}),
            location=JumuahLocation(location.get("name", ""), location.get("address")) if location else None,
        )

    def to_dict(self) -> dict:
        data = {"name": self.name, "time": self.time.to_dict()}
        if self.location is not None:
            data["location"] = self.location.to_dict()
        return data


@dataclass(frozen=True)
class CalculationMethod:
    name: str
    fajr_angle: Optional[float] = None
    isha_angle: Optional[float] = None
    asr_calculation_method: str = "Standard"
    high_latitude_adjustment: str = "MiddleOfTheNight"
    iqama_calculation_rules: Optional[IqamaCalculationRules] = None
    jumuah_rules: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "jumuah_rules", tuple(self.jumuah_rules or ()))

    @classmethod
    def from_dict(cls, data: dict) -> "CalculationMethod":
        rules = data.get("iqamaCalculationRules")
        return cls(
            name=data.get("name", ""),
            fajr_angle=data.get("fajrAngle"),
            isha_angle=data.get("ishaAngle"),
            asr_calculation_method=data.get("asrCalculationMethod") or "Standard",
            high_latitude_adjustment=data.get("highLatitudeAdjustment") or "MiddleOfTheNight",
            iqama_calculation_rules=IqamaCalculationRules.from_dict(rules) if rules else None,
            jumuah_rules=[JumuahRule.from_dict(j) for j in data.get("jumuahRules") or []],
        )

    def to_dict(self) -> dict:
        data = _drop_none({
            "name": self.name,
            "fajrAngle": self.fajr_angle,
            "ishaAngle": self.isha_angle,
            "asrCalculationMethod": self.asr_calculation_method,
            "highLatitudeAdjustment": self.high_latitude_adjustment,
        })
        if self.iqama_calculation_rules is not None:
            data["iqamaCalculationRules"] = self.iqama_calculation_rules.to_dict()
        if self.jumuah_rules:
            data["jumuahRules"] = [j.to_dict() for j in self.jumuah_rules]
        return data


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    timezone: str
    date_format: Optional[str] = None
    time_format: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            timezone=data["timezone"],
            date_format=data.get("dateFormat"),
            time_format=data.get("timeFormat"),
            city=data.get("city"),
            country=data.get("country"),
        )

    def to_dict(self) -> dict:
        return _drop_none({
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone": self.timezone,
            "dateFormat": self.date_format,
            "timeFormat": self.time_format,
            "city": self.city,
            "country": self.country,
        })


@dataclass(frozen=True)
class DayRecord:
    """One calendar day: its local midnight and the Athan times computed for it."""

    date: datetime.datetime
    athan: dict = field(default_factory=dict)

    def with_athan(self, athan: dict) -> "DayRecord":
        return dataclasses.replace(self, athan=athan)


ROW_HEADER = [
    "day", "fajr_athan", "fajr_iqama", "sunrise",
    "dhuhr_athan", "dhuhr_iqama", "asr_athan", "asr_iqama",
    "maghrib_athan", "maghrib_iqama", "isha_athan", "isha_iqama",
]


@dataclass(frozen=True)
class DayRow:
    """A timetable line. Times are 'HH:MM'; an empty string means not set."""

    date: str
    fajr_athan: str = ""
    fajr_iqama: str = ""
    sunrise: str = ""
    dhuhr_athan: str = ""
    dhuhr_iqama: str = ""
    asr_athan: str = ""
    asr_iqama: str = ""
    maghrib_athan: str = ""
    maghrib_iqama: str = ""
    isha_athan: str = ""
    isha_iqama: str = ""

    def as_list(self) -> list:
        return [
            self.date, self.fajr_athan, self.fajr_iqama, self.sunrise,
            self.dhuhr_athan, self.dhuhr_iqama, self.asr_athan, self.asr_iqama,
            self.maghrib_athan, self.maghrib_iqama, self.isha_athan, self.isha_iqama,
        ]

    def as_dict(self) -> dict:
        return dict(zip(ROW_HEADER, self.as_list()))
