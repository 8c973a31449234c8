"""
Run loop for the orbit simulator.

run_simulation advances a system by a fixed number of timesteps and, on
every telemetry tick (every export_step steps, starting with step 0),
writes the enabled CSV exports and collects one energy plot sample.

Failure policy:
- The first export error aborts the run. No further steps are integrated,
  no further exports are attempted and no plot is rendered. Files written
  on earlier ticks are left in place.
- A plot rendering error is reported and recorded on the result, but the
  run still counts as completed: the CSV output is complete.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from kepler.bodies import SystemState
from kepler.diagnostics import (
    system_energy,
    total_kinetic_energy,
    total_potential_energy,
)
from kepler.errors import ExportError, PlotRenderingError
from kepler.export import ExportManager, energy_plot_file_name
from kepler.io_cfg import RunConfig
from kepler.mover import system_timestep
from kepler.plot import PlotAggregator, PlotDatum
from kepler.progress import LoggingReporter, RunReporter, format_time, progress_percent

Integrator = Callable[[SystemState, float], SystemState]


@dataclass
class RunResult:
    """Outcome of a completed run.

    Attributes
    ----------
    final_state : SystemState
        State after the last integrated step.
    last_step : int
        Index of the last integrated step (equals config.steps).
    time : float
        Simulated time at last_step [s].
    written : list of Path
        CSV files written during the run, in first-write order.
    plot_samples : list of PlotDatum
        Energy samples collected (empty when plotting is disabled).
    plot_path : Path or None
        Rendered chart, if plotting was enabled and succeeded.
    plot_error : PlotRenderingError or None
        Why the chart could not be rendered, if it failed.
    """

    final_state: SystemState
    last_step: int
    time: float
    written: List[Path] = field(default_factory=list)
    plot_samples: List[PlotDatum] = field(default_factory=list)
    plot_path: Optional[Path] = None
    plot_error: Optional[PlotRenderingError] = None

    @property
    def plot_failed(self) -> bool:
        return self.plot_error is not None


def plot_datum(system: SystemState, time: float, config: RunConfig) -> PlotDatum:
    """Energy sample with the optional components the config asks for."""
    return PlotDatum(
        time=time,
        total_energy=system_energy(system),
        kinetic_energy=(
            total_kinetic_energy(system) if config.plot_system_kinetic_energy else None
        ),
        potential_energy=(
            total_potential_energy(system) if config.plot_system_potential_energy else None
        ),
    )


def run_simulation(
    config: RunConfig,
    initial_system: SystemState,
    *,
    integrator: Integrator = system_timestep,
    reporter: Optional[RunReporter] = None,
    exporter: Optional[ExportManager] = None,
) -> RunResult:
    """
    Integrate ``config.steps`` timesteps and export telemetry along the way.

    Parameters
    ----------
    config : RunConfig
        Run parameters and export/plot toggles.
    initial_system : SystemState
        State at time 0. Not modified.
    integrator : callable, optional
        ``(state, timestep) -> new state``. Defaults to velocity-Verlet.
    reporter : RunReporter, optional
        Receives progress notifications. Defaults to LoggingReporter.
    exporter : ExportManager, optional
        Owner of the export streams. A fresh one is created by default; a
        manager must not be reused across runs.

    Returns
    -------
    RunResult
        Final state, files written and plot outcome.

    Raises
    ------
    ExportError
        On the first export failure. The reporter's run_failed hook is
        called before the error propagates.

    Notes
    -----
    Telemetry ticks are the steps where ``step % export_step == 0``. Step 0
    is a tick whenever any export or plotting is enabled. The simulated
    time at step i is ``i * timestep``.

    Examples
    --------
    >>> config, system = load_config("sun_earth.yaml")
    >>> result = run_simulation(config, system)
    >>> result.last_step == config.steps
    True
    """
    if reporter is None:
        reporter = LoggingReporter()
    if exporter is None:
        exporter = ExportManager(config)

    telemetry = config.any_export or config.plot_system
    plot_data = PlotAggregator.from_config(config) if config.plot_system else None

    def tick(state: SystemState, step: int, time: float) -> None:
        reporter.tick_started(step, time)
        if plot_data is not None:
            plot_data.append(plot_datum(state, time, config))
        try:
            exporter.export_tick(state, step, time)
        except ExportError as e:
            reporter.run_failed(step, e)
            raise
        reporter.tick_completed(
            step,
            time,
            progress_percent(step, config.steps),
            format_time(int(time)),
        )

    reporter.run_started(config, initial_system)

    system = initial_system
    time = 0.0
    if telemetry:
        tick(system, 0, time)

    for step in range(1, config.steps + 1):
        system = integrator(system, config.timestep)
        time = step * config.timestep

        if telemetry and step % config.export_step == 0:
            tick(system, step, time)

    result = RunResult(
        final_state=system,
        last_step=config.steps,
        time=time,
        written=list(exporter.written),
        plot_samples=list(plot_data.samples) if plot_data is not None else [],
    )
    reporter.run_completed(result)

    if plot_data is not None:
        try:
            result.plot_path = _render_plot(plot_data, exporter, config)
        except PlotRenderingError as e:
            result.plot_error = e
            reporter.plot_failed(e)
        else:
            reporter.plot_completed(result.plot_path)

    return result


def _render_plot(plot_data: PlotAggregator, exporter: ExportManager, config: RunConfig) -> Path:
    try:
        directory = exporter.ensure_directory()
    except ExportError as e:
        raise PlotRenderingError(str(e)) from e
    return plot_data.render(directory / energy_plot_file_name(config.export_file_name_prefix))
