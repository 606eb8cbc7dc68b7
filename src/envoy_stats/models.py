"""Data models for gateway readings and time-series points."""

from dataclasses import dataclass, field
from typing import Any

LOCATION_PLACEHOLDER = "unknown"


@dataclass
class InverterSummary:
    """Inverter rollup at the head of the production array."""

    active_count: int = 0


@dataclass
class AggregateReading:
    """A production or consumption rollup from the gateway's meters."""

    measurement_type: str
    reading_time: int  # Unix seconds
    w_now: float
    wh_today: float
    wh_last_seven_days: float
    wh_lifetime: float
    active_count: int = 0
    rms_current: float = 0.0
    rms_voltage: float = 0.0
    react_pwr: float = 0.0
    apprnt_pwr: float = 0.0
    pwr_factor: float = 0.0
    varh_lead_lifetime: float = 0.0
    varh_lag_lifetime: float = 0.0
    vah_lifetime: float = 0.0
    vah_today: float = 0.0
    varh_lead_today: float = 0.0
    varh_lag_today: float = 0.0


@dataclass
class InverterReading:
    """The last report from a single micro-inverter."""

    serial_number: str
    last_report_date: int  # Unix seconds
    last_report_watts: float
    max_report_watts: float
    dev_type: int = 0


@dataclass
class ProductionSnapshot:
    """Everything decoded from one production.json fetch."""

    inverters: InverterSummary
    production: AggregateReading
    consumption: list[AggregateReading] = field(default_factory=list)

    @property
    def readings(self) -> list[AggregateReading]:
        """Consumption readings followed by the production reading."""
        return [*self.consumption, self.production]


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One row destined for the time-series database."""

    measurement: str
    tags: dict[str, str]
    fields: dict[str, Any]
    timestamp: int  # Unix seconds
