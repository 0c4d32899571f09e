"""Runtime services (telemetry, logging)."""

from . import telemetry

__all__ = ["telemetry"]
