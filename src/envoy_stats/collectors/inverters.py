"""Envoy per-inverter collector.

Fetches the last report of every micro-inverter from the gateway's
/api/v1/production/inverters endpoint, which sits behind digest
authentication. The installer password is the last 6 digits of the
gateway's serial number.
"""

import logging
from typing import Any

import httpx

from ..config import CollectorConfig
from ..db import write_points
from ..decode import decode_inverters
from ..digest import digest_get
from ..errors import DecodeError, GatewayError
from ..locations import load_locations, resolve_locations
from ..models import InverterReading, TimeSeriesPoint
from ..points import inverter_points

logger = logging.getLogger(__name__)


def fetch_inverters(
    config: CollectorConfig, transport: httpx.BaseTransport | None = None
) -> Any:
    """Fetch the inverters array and return the parsed JSON."""
    url = config.inverters_url
    with httpx.Client(timeout=config.timeout, transport=transport) as client:
        response = digest_get(client, url, config.envoy_user, config.envoy_password)

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise GatewayError("fetch_inverters", f"{url}: {e}") from e

    try:
        return response.json()
    except ValueError as e:
        raise DecodeError("decode_inverters", f"{url} returned invalid JSON: {e}") from e


def get_inverter_readings(
    config: CollectorConfig, transport: httpx.BaseTransport | None = None
) -> list[InverterReading]:
    """Fetch and decode the per-inverter readings, in gateway order."""
    return decode_inverters(fetch_inverters(config, transport))


def collect_inverters(
    config: CollectorConfig,
    transport: httpx.BaseTransport | None = None,
    dry_run: bool = False,
) -> list[TimeSeriesPoint]:
    """Fetch inverter readings and write them as one batch.

    Returns the points that were (or, for a dry run, would have been) written.
    """
    mapping = load_locations(config.locations_path)
    readings = get_inverter_readings(config, transport)
    locations = resolve_locations(readings, mapping)

    for reading in readings:
        logger.info(
            "date:%d location:%s serial:%s maxwatts:%.3f lastwatts:%.3f",
            reading.last_report_date,
            locations[reading.serial_number],
            reading.serial_number,
            reading.max_report_watts,
            reading.last_report_watts,
        )

    points = inverter_points(readings, config.inverter_measurement, locations)
    if not dry_run:
        write_points(points, config, step="influx_write_inverters")
    return points
