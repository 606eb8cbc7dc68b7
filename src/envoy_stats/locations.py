"""Inverter location mapping.

Locations come from an optional YAML file keyed by serial number:

    locations:
      "121703012345": east roof
      "121703012346": garage

Without a file every inverter is tagged with the placeholder location.
"""

from pathlib import Path

import yaml

from .errors import LocationsError
from .models import LOCATION_PLACEHOLDER, InverterReading


def load_locations(config_path: Path | None = None) -> dict[str, str]:
    """Load the serial -> location mapping from a YAML file."""
    if config_path is None:
        return {}
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise LocationsError("load_locations", f"{config_path}: {e}") from e

    if not isinstance(data, dict):
        raise LocationsError("load_locations", f"{config_path}: expected a mapping")
    entries = data.get("locations") or {}
    if not isinstance(entries, dict):
        raise LocationsError("load_locations", f"{config_path}: 'locations' must be a mapping")

    # YAML reads unquoted serials as integers
    return {str(serial): str(location) for serial, location in entries.items()}


def resolve_locations(
    readings: list[InverterReading], mapping: dict[str, str] | None = None
) -> dict[str, str]:
    """Return the location of every reading's serial, defaulting to the placeholder."""
    mapping = mapping or {}
    return {
        reading.serial_number: mapping.get(reading.serial_number, LOCATION_PLACEHOLDER)
        for reading in readings
    }
