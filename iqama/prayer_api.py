"""Fetch daily Athan times from the Aladhan API."""

import datetime

import requests

ALADHAN_BASE = "https://api.aladhan.com/v1"

# Aladhan response key -> our prayer name
PRAYER_KEYS = {
    "Fajr": "fajr",
    "Sunrise": "sunrise",
    "Dhuhr": "dhuhr",
    "Asr": "asr",
    "Maghrib": "maghrib",
    "Isha": "isha",
}

# Calculation method names -> Aladhan method ids. 99 = custom angles.
METHOD_IDS = {
    "JAFARI": 0,
    "KARACHI": 1,
    "ISNA": 2,
    "MWL": 3,
    "MAKKAH": 4,
    "EGYPT": 5,
    "TEHRAN": 7,
    "GULF": 8,
    "KUWAIT": 9,
    "QATAR": 10,
    "SINGAPORE": 11,
    "FRANCE": 12,
    "TURKEY": 13,
    "RUSSIA": 14,
    "MOONSIGHTING": 15,
    "DUBAI": 16,
}
CUSTOM_METHOD = 99
DEFAULT_METHOD = METHOD_IDS["MWL"]

LATITUDE_ADJUSTMENTS = {
    "MIDDLEOFTHENIGHT": 1,
    "MOTN": 1,
    "SEVENTHOFTHENIGHT": 2,
    "ONESEVENTH": 2,
    "ANGLEBASED": 3,
}


def method_params(calculation_method=None, high_latitude_adjustment: str = None) -> dict:
    """Translate a CalculationMethod into Aladhan query parameters."""
    if calculation_method is None:
        params = {"method": DEFAULT_METHOD, "school": 0}
    else:
        key = (calculation_method.name or "").upper()
        params = {"school": 1 if (calculation_method.asr_calculation_method or "").lower() == "hanafi" else 0}
        if key in METHOD_IDS:
            params["method"] = METHOD_IDS[key]
        elif calculation_method.fajr_angle is not None and calculation_method.isha_angle is not None:
            params["method"] = CUSTOM_METHOD
            params["methodSettings"] = f"{calculation_method.fajr_angle},null,{calculation_method.isha_angle}"
        else:
            raise ValueError(f"Unknown calculation method without angles: {calculation_method.name!r}")
        if high_latitude_adjustment is None:
            high_latitude_adjustment = calculation_method.high_latitude_adjustment

    if high_latitude_adjustment:
        adjustment = LATITUDE_ADJUSTMENTS.get(high_latitude_adjustment.replace("_", "").upper())
        if adjustment is not None:
            params["latitudeAdjustmentMethod"] = adjustment
    return params


def fetch_athan_times(
    date: datetime.date,
    latitude: float,
    longitude: float,
    elevation: float = 0,
    calculation_method=None,
    high_latitude_adjustment: str = None,
    timeout: int = 10,
) -> dict:
    """
    Fetch the six daily Athan times for a location and date.

    Returns {prayer_name: "HH:MM"} for fajr, sunrise, dhuhr, asr, maghrib
    and isha, as local wall-clock times of the location. elevation is
    accepted for signature compatibility; the API does not take it.
    Raises requests.RequestException or ValueError on failure.
    """
    date_str = date.strftime("%d-%m-%Y")
    url = f"{ALADHAN_BASE}/timings/{date_str}"
    params = {
        "latitude": latitude,
        "longitude": longitude,
        **method_params(calculation_method, high_latitude_adjustment),
    }
    resp = requests.get(url, params=params, timeout=timeout)
    resp.raise_for_status()
    body = resp.json()
    if body.get("code") != 200:
        raise ValueError(f"Aladhan API error: {body.get('status')}")

    raw_timings = body["data"]["timings"]

    # Keep only the six prayer slots, trimming "(EST)"-style suffixes
    timings = {}
    for key, name in PRAYER_KEYS.items():
        raw = raw_timings.get(key)
        if raw:
            timings[name] = raw[:5]  # "HH:MM"
    return timings
