"""InfluxDB connection and batch writes.

Talks to InfluxDB 1.8+ through the 1.x compatibility endpoints of
influxdb-client: the token is ``username:password`` and the bucket is the
database name.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from influxdb_client import InfluxDBClient, Point, WritePrecision
from influxdb_client.client.write_api import SYNCHRONOUS

from .config import CollectorConfig
from .errors import WriteError
from .models import TimeSeriesPoint

logger = logging.getLogger(__name__)

# Ignored by 1.x compatibility writes but required by the client
V1_ORG = "-"


@contextmanager
def get_client(config: CollectorConfig) -> Iterator[InfluxDBClient]:
    """Get an InfluxDB client, closed when the block exits."""
    try:
        client = InfluxDBClient(
            url=config.influx_addr,
            token=f"{config.db_user}:{config.db_password}",
            org=V1_ORG,
        )
    except Exception as e:
        raise WriteError("influx_connect", f"{config.influx_addr}: {e}") from e
    try:
        yield client
    finally:
        client.close()


def to_influx_point(point: TimeSeriesPoint) -> Point:
    """Convert a TimeSeriesPoint to an influxdb-client Point at second precision."""
    p = Point(point.measurement)
    for key, value in point.tags.items():
        p.tag(key, value)
    for key, value in point.fields.items():
        p.field(key, value)
    return p.time(point.timestamp, WritePrecision.S)


def write_points(points: list[TimeSeriesPoint], config: CollectorConfig, step: str = "influx_write") -> int:
    """Write all points to the configured database in a single batch.

    Returns the number of points written.
    """
    if not points:
        logger.warning("No points to write to %s", config.db_name)
        return 0

    try:
        batch = [to_influx_point(point) for point in points]
    except (TypeError, ValueError) as e:
        raise WriteError(f"{step}.batch", str(e)) from e

    with get_client(config) as client:
        try:
            client.write_api(write_options=SYNCHRONOUS).write(
                bucket=config.db_name,
                org=V1_ORG,
                record=batch,
                write_precision=WritePrecision.S,
            )
        except Exception as e:
            raise WriteError(step, f"{config.influx_addr}/{config.db_name}: {e}") from e

    logger.info("Wrote %d point(s) to %s", len(batch), config.db_name)
    return len(batch)
