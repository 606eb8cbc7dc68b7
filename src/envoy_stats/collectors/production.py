"""Envoy production and consumption collector.

Fetches production.json from the gateway's local HTTP API. No authentication
is needed for this endpoint.
"""

import logging
from typing import Any

import httpx

from ..config import CollectorConfig
from ..db import write_points
from ..decode import decode_production
from ..errors import DecodeError, GatewayError
from ..models import ProductionSnapshot, TimeSeriesPoint
from ..points import aggregate_points

logger = logging.getLogger(__name__)


def fetch_production(
    config: CollectorConfig, transport: httpx.BaseTransport | None = None
) -> Any:
    """Fetch the production.json document and return the parsed JSON."""
    url = config.production_url
    try:
        with httpx.Client(timeout=config.timeout, transport=transport) as client:
            response = client.get(url)
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise GatewayError("fetch_production", f"{url}: {e}") from e

    try:
        return response.json()
    except ValueError as e:
        raise DecodeError("decode_production", f"{url} returned invalid JSON: {e}") from e


def get_snapshot(
    config: CollectorConfig, transport: httpx.BaseTransport | None = None
) -> ProductionSnapshot:
    """Fetch and decode production and consumption readings."""
    snapshot = decode_production(fetch_production(config, transport))

    for reading in snapshot.readings:
        logger.info(
            "%d %s: %.3f", reading.reading_time, reading.measurement_type, reading.w_now
        )
    return snapshot


def collect_production(
    config: CollectorConfig,
    transport: httpx.BaseTransport | None = None,
    dry_run: bool = False,
) -> list[TimeSeriesPoint]:
    """Fetch production and consumption readings and write them as one batch.

    Returns the points that were (or, for a dry run, would have been) written.
    """
    snapshot = get_snapshot(config, transport)
    points = aggregate_points(snapshot.readings, config.measurement)

    if not dry_run:
        write_points(points, config, step="influx_write_readings")
    return points
