"""Command-line interface for the Envoy to InfluxDB collector."""

import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from . import config as defaults
from . import pipeline
from .collectors import inverters, production
from .config import CollectorConfig
from .errors import CollectorError
from .locations import load_locations, resolve_locations
from .log import setup_logging
from .models import TimeSeriesPoint

# Load environment variables from .env file
load_dotenv()

console = Console()
logger = logging.getLogger("envoy_stats")


@click.group()
@click.option("--envoy-host", envvar="ENVOY_HOST_PTR", default=defaults.DEFAULT_ENVOY_HOST,
              show_default=True, help="IP or hostname of the Envoy")
@click.option("--envoy-user", envvar="ENVOY_USER_NAME", default=defaults.DEFAULT_ENVOY_USER,
              show_default=True, help="Envoy username")
@click.option("--envoy-password", envvar="ENVOY_PASSWORD", default=defaults.DEFAULT_ENVOY_PASSWORD,
              help="Envoy password (last 6 digits of the serial)")
@click.option("--influx-addr", envvar="INFLUX_ADDR_PTR", default=defaults.DEFAULT_INFLUX_ADDR,
              show_default=True, help="InfluxDB connection address")
@click.option("--db-name", envvar="DB_NAME_PTR", default=defaults.DEFAULT_DB_NAME,
              show_default=True, help="InfluxDB database to put readings in")
@click.option("--db-user", envvar="DB_USER_PTR", default=defaults.DEFAULT_DB_USER,
              show_default=True, help="InfluxDB username")
@click.option("--db-password", envvar="DB_PW_PTR", default=defaults.DEFAULT_DB_PASSWORD,
              help="InfluxDB password")
@click.option("--measurement", envvar="MEASUREMENT_NAME_PTR", default=defaults.DEFAULT_MEASUREMENT,
              show_default=True, help="Measurement name for production/consumption readings")
@click.option("--inverter-measurement", envvar="MEASUREMENT_INVERTER_NAME_PTR",
              default=defaults.DEFAULT_INVERTER_MEASUREMENT, show_default=True,
              help="Measurement name for per-inverter readings")
@click.option("--timeout", envvar="ENVOY_TIMEOUT", type=float, default=defaults.DEFAULT_TIMEOUT,
              show_default=True, help="Envoy request timeout in seconds")
@click.option("--locations", "locations_path", envvar="INVERTER_LOCATIONS",
              type=click.Path(dir_okay=False, path_type=Path),
              help="YAML file mapping inverter serials to locations")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors (cron-friendly)")
@click.pass_context
def cli(ctx, envoy_host, envoy_user, envoy_password, influx_addr, db_name, db_user,
        db_password, measurement, inverter_measurement, timeout, locations_path,
        verbose, quiet):
    """Collect Enphase Envoy production and inverter stats into InfluxDB."""
    setup_logging(verbose=verbose, quiet=quiet)
    ctx.ensure_object(dict)
    ctx.obj["config"] = CollectorConfig(
        envoy_host=envoy_host,
        envoy_user=envoy_user,
        envoy_password=envoy_password,
        influx_addr=influx_addr,
        db_name=db_name,
        db_user=db_user,
        db_password=db_password,
        measurement=measurement,
        inverter_measurement=inverter_measurement,
        timeout=timeout,
        locations_path=locations_path,
    )


def fail(error: CollectorError):
    """Log a fatal collector error and exit non-zero."""
    logger.error("%s", error)
    sys.exit(1)


def points_table(title: str, points: list[TimeSeriesPoint]) -> Table:
    table = Table(title=title)
    table.add_column("Measurement", style="cyan")
    table.add_column("Tags")
    table.add_column("Fields")
    table.add_column("Time", justify="right")

    for point in points:
        table.add_row(
            point.measurement,
            ",".join(f"{k}={v}" for k, v in point.tags.items()),
            ",".join(f"{k}={v}" for k, v in point.fields.items()),
            str(point.timestamp),
        )
    return table


@cli.command()
@click.option("--dry-run", is_flag=True, help="Fetch and map readings but don't write them")
@click.pass_context
def collect(ctx, dry_run):
    """Fetch readings from the Envoy and write them to InfluxDB.

    Meant to be run periodically (e.g., every 5 minutes via cron).
    """
    try:
        summary = pipeline.run(ctx.obj["config"], dry_run=dry_run)
    except CollectorError as e:
        fail(e)

    if dry_run:
        console.print(points_table("Readings (not written)", summary.readings))
        console.print(points_table("Inverters (not written)", summary.inverters))


@cli.command()
@click.pass_context
def show(ctx):
    """Show the current Envoy readings without writing anything."""
    config = ctx.obj["config"]
    try:
        snapshot = production.get_snapshot(config)
        readings = inverters.get_inverter_readings(config)
        locations = resolve_locations(readings, load_locations(config.locations_path))
    except CollectorError as e:
        fail(e)

    table = Table(title=f"Envoy @ {config.envoy_host}")
    table.add_column("Type", style="cyan")
    table.add_column("Time", justify="right")
    table.add_column("Power (W)", justify="right")
    table.add_column("Today (kWh)", justify="right")
    table.add_column("7 days (kWh)", justify="right")
    table.add_column("Lifetime (kWh)", justify="right")

    for reading in snapshot.readings:
        table.add_row(
            reading.measurement_type,
            str(reading.reading_time),
            f"{reading.w_now:.1f}",
            f"{reading.wh_today / 1000:.2f}",
            f"{reading.wh_last_seven_days / 1000:.2f}",
            f"{reading.wh_lifetime / 1000:.2f}",
        )
    console.print(table)
    console.print(f"Active inverters: {snapshot.inverters.active_count}")

    table = Table(title="Inverters")
    table.add_column("Serial", style="cyan")
    table.add_column("Location")
    table.add_column("Last report", justify="right")
    table.add_column("Last (W)", justify="right")
    table.add_column("Max (W)", justify="right")

    for reading in readings:
        table.add_row(
            reading.serial_number,
            locations[reading.serial_number],
            str(reading.last_report_date),
            f"{reading.last_report_watts:.0f}",
            f"{reading.max_report_watts:.0f}",
        )
    console.print(table)


@cli.command("config")
@click.pass_context
def show_config(ctx):
    """Show the effective configuration (passwords hidden)."""
    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for key, value in ctx.obj["config"].masked().items():
        table.add_row(key, value)
    console.print(table)


if __name__ == "__main__":
    cli()
