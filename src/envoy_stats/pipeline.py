"""One collector run: production and consumption first, then inverters.

The first failure propagates to the caller and the remaining steps are
skipped. A batch already written stays written.
"""

import logging
from dataclasses import dataclass, field

import httpx

from .collectors.inverters import collect_inverters
from .collectors.production import collect_production
from .config import CollectorConfig
from .models import TimeSeriesPoint

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Points produced by each stage of a run."""

    readings: list[TimeSeriesPoint] = field(default_factory=list)
    inverters: list[TimeSeriesPoint] = field(default_factory=list)
    dry_run: bool = False


def run(
    config: CollectorConfig,
    transport: httpx.BaseTransport | None = None,
    dry_run: bool = False,
) -> RunSummary:
    logger.info("app.status=starting")
    summary = RunSummary(dry_run=dry_run)
    summary.readings = collect_production(config, transport, dry_run=dry_run)
    summary.inverters = collect_inverters(config, transport, dry_run=dry_run)
    logger.info(
        "app.status=done readings=%d inverters=%d",
        len(summary.readings),
        len(summary.inverters),
    )
    return summary
