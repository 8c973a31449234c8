"""Progress reporting for simulation runs.

The orchestrator never prints or logs directly. It calls a RunReporter at
well-defined points of the run; the default LoggingReporter forwards those
calls to the ``kepler.simulation`` logger.
"""

from __future__ import annotations

import logging
from typing import Any, List, Tuple

logger = logging.getLogger("kepler.simulation")

ONE_MINUTE = 60
ONE_HOUR = ONE_MINUTE * 60  # 3_600 seconds
ONE_DAY = ONE_HOUR * 24  # 86_400 seconds
ONE_MONTH = ONE_DAY * 30  # 2_592_000 seconds
ONE_YEAR = ONE_MONTH * 12  # 31_104_000 seconds


def format_time(seconds: int) -> str:
    """Format a duration in seconds in a human readable way.

    One month is taken as 30 days and one year as 12 * 30 days, so the
    larger units are approximate.

    Examples
    --------
    >>> format_time(360)
    '6.00min'
    >>> format_time(86_399)
    '24.00h'
    >>> format_time(86_400)
    '1.00days'
    """
    seconds = int(seconds)
    if seconds < 0:
        raise ValueError(f"Duration must be non-negative, got {seconds}")

    if seconds < ONE_MINUTE:
        return f"{seconds:.2f}s"
    if seconds < ONE_HOUR:
        return f"{seconds / ONE_MINUTE:.2f}min"
    if seconds < ONE_DAY:
        return f"{seconds / ONE_HOUR:.2f}h"
    if seconds < ONE_MONTH:
        return f"{seconds / ONE_DAY:.2f}days"
    if seconds < ONE_YEAR:
        return f"{seconds / ONE_MONTH:.2f}months"
    return f"{seconds / ONE_YEAR:.2f}y"


def progress_percent(step: int, steps: int) -> float:
    """Percent of the run completed at ``step``; a zero-step run is complete."""
    if steps <= 0:
        return 100.0
    return step / steps * 100.0


class RunReporter:
    """Observer notified by the orchestrator.

    Every hook is a no-op here; subclasses override what they need.
    """

    def run_started(self, config, system) -> None:
        pass

    def tick_started(self, step: int, time: float) -> None:
        pass

    def tick_completed(self, step: int, time: float, progress: float, elapsed: str) -> None:
        pass

    def run_completed(self, result) -> None:
        pass

    def run_failed(self, step: int, error: BaseException) -> None:
        pass

    def plot_completed(self, path) -> None:
        pass

    def plot_failed(self, error: BaseException) -> None:
        pass


class LoggingReporter(RunReporter):
    """Report run progress through :mod:`logging`."""

    def __init__(self, log: logging.Logger = logger):
        self.log = log

    def run_started(self, config, system) -> None:
        self.log.info(
            "Running simulation: %d bodies, %d steps of %gs, export every %d steps",
            len(system), config.steps, config.timestep, config.export_step,
        )

    def tick_started(self, step: int, time: float) -> None:
        self.log.debug("Exporting step %d, time %gs", step, time)

    def tick_completed(self, step: int, time: float, progress: float, elapsed: str) -> None:
        self.log.debug("Exported step %d, time %gs", step, time)
        self.log.info("Progress: %.2f%%, time: %s", progress, elapsed)

    def run_completed(self, result) -> None:
        self.log.info(
            "Simulation finished after %d steps (%s simulated)",
            result.last_step, format_time(int(result.time)),
        )

    def run_failed(self, step: int, error: BaseException) -> None:
        self.log.error("Error while exporting step %d: %s", step, error)

    def plot_completed(self, path) -> None:
        self.log.info("Plotted total energy to %s", path)

    def plot_failed(self, error: BaseException) -> None:
        self.log.error("Error while plotting total energy: %s", error)


class RecordingReporter(RunReporter):
    """Keep every notification as an ``(event, *args)`` tuple."""

    def __init__(self):
        self.events: List[Tuple[Any, ...]] = []

    def run_started(self, config, system) -> None:
        self.events.append(("run_started",))

    def tick_started(self, step: int, time: float) -> None:
        self.events.append(("tick_started", step, time))

    def tick_completed(self, step: int, time: float, progress: float, elapsed: str) -> None:
        self.events.append(("tick_completed", step, time, progress, elapsed))

    def run_completed(self, result) -> None:
        self.events.append(("run_completed", result.last_step))

    def run_failed(self, step: int, error: BaseException) -> None:
        self.events.append(("run_failed", step, error))

    def plot_completed(self, path) -> None:
        self.events.append(("plot_completed", path))

    def plot_failed(self, error: BaseException) -> None:
        self.events.append(("plot_failed", error))

    def names(self) -> List[str]:
        """Event names in call order."""
        return [event[0] for event in self.events]
