"""Exception hierarchy for the :mod:`kepler` package."""

from __future__ import annotations


class KeplerError(Exception):
    """Base exception for orbit simulator errors."""


class ConfigurationError(KeplerError, ValueError):
    """Configuration file unreadable or failing schema validation."""


class ExportError(KeplerError, OSError):
    """An export stream could not be created, opened, written or flushed."""


class DestinationConflictError(ExportError):
    """A path that must be a regular file exists but is something else."""


class PlotRenderingError(KeplerError, RuntimeError):
    """Chart construction or drawing failed."""


__all__ = [
    "KeplerError",
    "ConfigurationError",
    "ExportError",
    "DestinationConflictError",
    "PlotRenderingError",
]
