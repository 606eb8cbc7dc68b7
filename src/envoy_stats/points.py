"""Mapping of gateway readings to time-series points."""

from .models import LOCATION_PLACEHOLDER, AggregateReading, InverterReading, TimeSeriesPoint


def aggregate_point(reading: AggregateReading, measurement: str) -> TimeSeriesPoint:
    """Map a production or consumption reading to a point tagged by type."""
    return TimeSeriesPoint(
        measurement=measurement,
        tags={"type": reading.measurement_type},
        fields={
            "active_count": reading.active_count,
            "power_now_watts": reading.w_now,
            "today_watthours": reading.wh_today,
            "7days_watthours": reading.wh_last_seven_days,
            "lifetime_watthours": reading.wh_lifetime,
        },
        timestamp=reading.reading_time,
    )


def inverter_point(
    reading: InverterReading, measurement: str, location: str = LOCATION_PLACEHOLDER
) -> TimeSeriesPoint:
    """Map an inverter's last report to a point tagged by serial and location."""
    return TimeSeriesPoint(
        measurement=measurement,
        tags={"serial": reading.serial_number, "location": location},
        fields={
            "last_report_watts": reading.last_report_watts,
            "max_report_watts": reading.max_report_watts,
        },
        timestamp=reading.last_report_date,
    )


def aggregate_points(readings: list[AggregateReading], measurement: str) -> list[TimeSeriesPoint]:
    return [aggregate_point(reading, measurement) for reading in readings]


def inverter_points(
    readings: list[InverterReading],
    measurement: str,
    locations: dict[str, str] | None = None,
) -> list[TimeSeriesPoint]:
    """Map inverter readings, looking each serial up in ``locations``."""
    locations = locations or {}
    return [
        inverter_point(
            reading, measurement, locations.get(reading.serial_number, LOCATION_PLACEHOLDER)
        )
        for reading in readings
    ]
