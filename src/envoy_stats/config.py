"""Collector configuration."""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_ENVOY_HOST = "envoy.local"
DEFAULT_ENVOY_USER = "envoy"
DEFAULT_ENVOY_PASSWORD = "12345"
DEFAULT_INFLUX_ADDR = "http://localhost:8086"
DEFAULT_DB_NAME = "db0"
DEFAULT_DB_USER = "admin"
DEFAULT_DB_PASSWORD = "admin"
DEFAULT_MEASUREMENT = "readings"
DEFAULT_INVERTER_MEASUREMENT = "inverter_readings"
DEFAULT_TIMEOUT = 4.0


@dataclass(frozen=True)
class CollectorConfig:
    """Settings for one collector run, built once at startup."""

    envoy_host: str = DEFAULT_ENVOY_HOST
    envoy_user: str = DEFAULT_ENVOY_USER
    envoy_password: str = DEFAULT_ENVOY_PASSWORD
    influx_addr: str = DEFAULT_INFLUX_ADDR
    db_name: str = DEFAULT_DB_NAME
    db_user: str = DEFAULT_DB_USER
    db_password: str = DEFAULT_DB_PASSWORD
    measurement: str = DEFAULT_MEASUREMENT
    inverter_measurement: str = DEFAULT_INVERTER_MEASUREMENT
    timeout: float = DEFAULT_TIMEOUT
    locations_path: Path | None = None

    @property
    def production_url(self) -> str:
        return f"http://{self.envoy_host}/production.json?details=1"

    @property
    def inverters_url(self) -> str:
        return f"http://{self.envoy_host}/api/v1/production/inverters"

    def masked(self) -> dict[str, str]:
        """Return the settings as display strings with passwords hidden."""
        return {
            "envoy_host": self.envoy_host,
            "envoy_user": self.envoy_user,
            "envoy_password": "*" * len(self.envoy_password),
            "influx_addr": self.influx_addr,
            "db_name": self.db_name,
            "db_user": self.db_user,
            "db_password": "*" * len(self.db_password),
            "measurement": self.measurement,
            "inverter_measurement": self.inverter_measurement,
            "timeout": f"{self.timeout:g}s",
            "locations_path": str(self.locations_path) if self.locations_path else "-",
        }
