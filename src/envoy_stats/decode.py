"""Decoding of gateway JSON into typed readings.

Only types are checked. A missing key or a JSON null decodes to the zero value
of the field; a value of the wrong JSON type is an error naming the field.
"""

import logging
from typing import Any

from .errors import DecodeError, ProductionLengthError, ProductionShapeError
from .models import AggregateReading, InverterReading, InverterSummary, ProductionSnapshot

logger = logging.getLogger(__name__)

# Gateway key -> AggregateReading attribute, for the float-valued meter fields
_AGGREGATE_FLOAT_FIELDS = {
    "wNow": "w_now",
    "whToday": "wh_today",
    "whLastSevenDays": "wh_last_seven_days",
    "whLifetime": "wh_lifetime",
    "rmsCurrent": "rms_current",
    "rmsVoltage": "rms_voltage",
    "reactPwr": "react_pwr",
    "apprntPwr": "apprnt_pwr",
    "pwrFactor": "pwr_factor",
    "varhLeadLifetime": "varh_lead_lifetime",
    "varhLagLifetime": "varh_lag_lifetime",
    "vahLifetime": "vah_lifetime",
    "vahToday": "vah_today",
    "varhLeadToday": "varh_lead_today",
    "varhLagToday": "varh_lag_today",
}


def _expect_object(value: Any, what: str, step: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(step, f"{what}: expected object, got {type(value).__name__}")
    return value


def _string(obj: dict[str, Any], key: str, step: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(step, f"{key}: expected string, got {type(value).__name__}")
    return value


def _float(obj: dict[str, Any], key: str, step: str) -> float:
    value = obj.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(step, f"{key}: expected number, got {type(value).__name__}")
    return float(value)


def _int(obj: dict[str, Any], key: str, step: str) -> int:
    value = obj.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(step, f"{key}: expected integer, got {type(value).__name__}")
    if isinstance(value, float):
        if not value.is_integer():
            raise DecodeError(step, f"{key}: expected integer, got {value}")
        return int(value)
    return value


def decode_inverter_summary(obj: Any, step: str = "decode_inverter_summary") -> InverterSummary:
    """Decode the inverter rollup object."""
    obj = _expect_object(obj, "inverter summary", step)
    return InverterSummary(active_count=_int(obj, "activeCount", step))


def decode_aggregate_reading(obj: Any, step: str = "decode_aggregate_reading") -> AggregateReading:
    """Decode one production or consumption meter object."""
    obj = _expect_object(obj, "aggregate reading", step)
    floats = {attr: _float(obj, key, step) for key, attr in _AGGREGATE_FLOAT_FIELDS.items()}
    return AggregateReading(
        measurement_type=_string(obj, "measurementType", step),
        reading_time=_int(obj, "readingTime", step),
        active_count=_int(obj, "activeCount", step),
        **floats,
    )


def decode_inverter_reading(obj: Any, step: str = "decode_inverter_reading") -> InverterReading:
    """Decode one entry of the inverters array."""
    obj = _expect_object(obj, "inverter reading", step)
    return InverterReading(
        serial_number=_string(obj, "serialNumber", step),
        last_report_date=_int(obj, "lastReportDate", step),
        last_report_watts=_float(obj, "lastReportWatts", step),
        max_report_watts=_float(obj, "maxReportWatts", step),
        dev_type=_int(obj, "devType", step),
    )


def decode_production_array(section: Any) -> tuple[InverterSummary, AggregateReading]:
    """Decode the two-element production array by position.

    Element 0 is the inverter rollup, element 1 the production meter.
    """
    step = "decode_production"
    if not isinstance(section, list):
        raise ProductionShapeError(
            step, f"production: expected array, got {type(section).__name__}"
        )
    if len(section) < 2:
        raise ProductionLengthError(
            step, f"production: expected 2 elements, got {len(section)}"
        )
    if len(section) > 2:
        logger.debug("Ignoring %d extra production element(s)", len(section) - 2)

    try:
        summary = decode_inverter_summary(section[0], step)
    except DecodeError as e:
        raise ProductionShapeError(step, f"production[0]: {e.args[0]}") from e
    try:
        reading = decode_aggregate_reading(section[1], step)
    except DecodeError as e:
        raise ProductionShapeError(step, f"production[1]: {e.args[0]}") from e
    return summary, reading


def decode_production(payload: Any) -> ProductionSnapshot:
    """Decode a production.json document.

    The storage section is accepted but not used.
    """
    obj = _expect_object(payload, "production.json", "decode_production")
    if "production" not in obj:
        raise ProductionLengthError("decode_production", "production: section missing")
    summary, production = decode_production_array(obj["production"])

    section = obj.get("consumption")
    if section is None:
        section = []
    if not isinstance(section, list):
        raise DecodeError(
            "decode_consumption",
            f"consumption: expected array, got {type(section).__name__}",
        )
    consumption = [decode_aggregate_reading(item, "decode_consumption") for item in section]

    return ProductionSnapshot(inverters=summary, production=production, consumption=consumption)


def decode_inverters(payload: Any) -> list[InverterReading]:
    """Decode the per-inverter array, keeping the gateway's order."""
    step = "decode_inverters"
    if not isinstance(payload, list):
        raise DecodeError(step, f"inverters: expected array, got {type(payload).__name__}")
    return [decode_inverter_reading(item, step) for item in payload]
