"""Exceptions raised by the collector.

Every error carries the name of the step that failed so the command line can
report it in one line and exit.
"""


class CollectorError(Exception):
    """Base exception for collector errors."""

    def __init__(self, step: str, message: str):
        super().__init__(message)
        self.step = step

    def __str__(self) -> str:
        return f"{self.step}: {super().__str__()}"


class GatewayError(CollectorError):
    """The gateway could not be reached or answered with an error status."""


class DecodeError(CollectorError):
    """A gateway response could not be decoded into readings."""


class ProductionLengthError(DecodeError):
    """The production array has fewer elements than expected."""


class ProductionShapeError(DecodeError):
    """An element of the production array has the wrong shape."""


class DigestAuthError(CollectorError):
    """A phase of the digest authentication exchange failed."""

    def __init__(self, phase: str, message: str, step: str = "digest"):
        super().__init__(f"{step}.{phase}", message)
        self.phase = phase


class LocationsError(CollectorError):
    """The inverter location mapping file could not be loaded."""


class WriteError(CollectorError):
    """Points could not be written to InfluxDB."""
