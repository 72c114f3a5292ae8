"""Saved build configuration: location, calculation method and elevation."""

import json
import os
from typing import NamedTuple

from iqama.models import CalculationMethod, Location

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".iqama")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")


class BuildConfig(NamedTuple):
    location: Location
    calculation_method: CalculationMethod
    elevation: float = 0


def save_config(location: Location, calculation_method: CalculationMethod, elevation: float = 0) -> None:
    """Save the build configuration to the config file."""
    os.makedirs(CONFIG_DIR, exist_ok=True)
    data = {
        "location": location.to_dict(),
        "calculationMethod": calculation_method.to_dict(),
        "elevation": elevation,
    }
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def load_config() -> BuildConfig | None:
    """
    Load the saved build configuration, or return None.

    None is returned when there is no file, when it is not valid JSON, or
    when the location or calculation method section is missing. A present
    but invalid rule (unknown change frequency, override condition or
    weekday) raises ValueError.
    """
    if not os.path.isfile(CONFIG_FILE):
        return None
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return None
    if not isinstance(data, dict) or not all(k in data for k in ("location", "calculationMethod")):
        return None
    return BuildConfig(
        location=Location.from_dict(data["location"]),
        calculation_method=CalculationMethod.from_dict(data["calculationMethod"]),
        elevation=data.get("elevation") or 0,
    )


def clear_config() -> None:
    """Remove the saved configuration file."""
    if os.path.isfile(CONFIG_FILE):
        os.remove(CONFIG_FILE)
