"""CSV export streams for simulation telemetry.

Three kinds of output are maintained, each independently enabled by the
run configuration:

- Snapshot stream: ``{prefix}_{step}.csv``, one fresh file per telemetry
  tick holding every body. Never appended to.
- Body history streams: ``{prefix}_{body}.csv``, one append log per body,
  one row per tick.
- System parameters stream: ``{prefix}_system_parameters.csv``, one append
  log for the whole system (energy, impulse, center of mass), one row per
  tick.

Append logs follow a small lifecycle tracked in memory for the duration of
a run rather than by probing the filesystem:

    NOT_CREATED --(any step)--> truncate, header + row --> CREATED
    CREATED     --(step == 0)-> truncate, header + row --> CREATED
    CREATED     --(step > 0)--> append row             --> CREATED

Writing at step 0 always starts the file over, so a new run never appends
to rows left behind by a previous run against the same directory.

Every failure to create the export directory or to open, write or flush a
file is raised as ExportError; nothing is retried or rolled back.
"""

import csv
import io
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from kepler.bodies import SystemState
from kepler.diagnostics import SystemParameters, system_parameters
from kepler.errors import DestinationConflictError, ExportError
from kepler.io_cfg import RunConfig

SNAPSHOT_COLUMNS = ("Time", "Name", "Mass", "x", "y", "vx", "vy")
BODY_HISTORY_COLUMNS = ("Step", "Time", "Mass", "x", "y", "vx", "vy")
SYSTEM_PARAMETERS_COLUMNS = (
    "Step",
    "Time",
    "Energy",
    "Impulse x",
    "Impulse y",
    "Center of mass x",
    "Center of mass y",
)


class StreamState(Enum):
    NOT_CREATED = "not_created"
    CREATED = "created"


# ============================================================================
# File naming
# ============================================================================

def snapshot_file_name(prefix: str, step: int) -> str:
    return f"{prefix}_{step}.csv"


def body_history_file_name(prefix: str, body_name: str) -> str:
    return f"{prefix}_{body_name}.csv"


def system_parameters_file_name(prefix: str) -> str:
    return f"{prefix}_system_parameters.csv"


def energy_plot_file_name(prefix: str) -> str:
    return f"{prefix}_Energy.svg"


# ============================================================================
# Row serialization
# ============================================================================

def format_row(values: Iterable) -> str:
    """Serialize one CSV record without a line terminator.

    The csv module always terminates records; the terminator is stripped so
    that the caller writes exactly one newline per row.

    Examples
    --------
    >>> format_row([0, 0.5, "Sun"])
    '0,0.5,Sun'
    """
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(values)
    return buffer.getvalue().rstrip("\r\n")


def _check_destination(path: Path) -> None:
    if path.exists() and not path.is_file():
        raise DestinationConflictError(
            f"The destination file object already exists, but it is not a file: {path}"
        )


def _write_lines(path: Path, lines: Sequence[str], mode: str) -> None:
    try:
        with open(path, mode, newline="") as f:
            for line in lines:
                f.write(line)
                f.write("\n")
            f.flush()
    except OSError as e:
        raise ExportError(f"Error while writing {path}: {e}") from e


# ============================================================================
# Streams
# ============================================================================

@dataclass
class ExportStream:
    """One append-style CSV file and its lifecycle state.

    Attributes
    ----------
    path : Path
        Target file.
    columns : tuple of str
        Header row, fixed per stream kind.
    state : StreamState
        NOT_CREATED until this run has written the header.
    rows : int
        Data rows written since the header was (re)written.
    """

    path: Path
    columns: Tuple[str, ...]
    state: StreamState = StreamState.NOT_CREATED
    rows: int = 0

    def write_row(self, step: int, row: Sequence) -> None:
        """Write one data row, creating or restarting the file when needed.

        Raises
        ------
        DestinationConflictError
            If the path exists and is not a regular file. Nothing is written.
        ExportError
            If the file cannot be opened, written or flushed.
        """
        if self.state is StreamState.NOT_CREATED or step == 0:
            _check_destination(self.path)
            _write_lines(self.path, [format_row(self.columns), format_row(row)], "w")
            self.state = StreamState.CREATED
            self.rows = 1
        else:
            _write_lines(self.path, [format_row(row)], "a")
            self.rows += 1


def body_history_row(step: int, time: float, body) -> List:
    return [
        step,
        float(time),
        body.mass,
        float(body.position[0]),
        float(body.position[1]),
        float(body.velocity[0]),
        float(body.velocity[1]),
    ]


def system_parameters_row(step: int, time: float, params: SystemParameters) -> List:
    return [
        step,
        float(time),
        float(params.energy),
        float(params.impulse[0]),
        float(params.impulse[1]),
        float(params.center_of_mass[0]),
        float(params.center_of_mass[1]),
    ]


def write_snapshot(path: Path, system: SystemState, time: float) -> None:
    """Write a complete snapshot file, replacing any previous content."""
    lines = [format_row(SNAPSHOT_COLUMNS)]
    for body in system:
        lines.append(format_row([
            float(time),
            body.name,
            body.mass,
            float(body.position[0]),
            float(body.position[1]),
            float(body.velocity[0]),
            float(body.velocity[1]),
        ]))
    _check_destination(path)
    _write_lines(path, lines, "w")


# ============================================================================
# Manager
# ============================================================================

@dataclass
class ExportManager:
    """Owns every export stream of one run.

    A manager must not be shared between runs: stream state lives here and
    is what decides between restarting and appending.

    Parameters
    ----------
    config : RunConfig
        Supplies the export directory, file name prefix and toggles.
    calculate_parameters : callable, optional
        SystemState -> SystemParameters, used for the aggregated stream.
    """

    config: RunConfig
    calculate_parameters: Callable[[SystemState], SystemParameters] = system_parameters
    written: List[Path] = field(default_factory=list, init=False)
    _body_streams: Dict[str, ExportStream] = field(default_factory=dict, init=False, repr=False)
    _parameters_stream: Optional[ExportStream] = field(default=None, init=False, repr=False)
    _directory_ready: bool = field(default=False, init=False, repr=False)

    @property
    def directory(self) -> Path:
        return self.config.export_path

    @property
    def prefix(self) -> str:
        return self.config.export_file_name_prefix

    @property
    def body_streams(self) -> Dict[str, ExportStream]:
        return dict(self._body_streams)

    @property
    def parameters_stream(self) -> Optional[ExportStream]:
        return self._parameters_stream

    def ensure_directory(self) -> Path:
        """Create the export directory (recursively) on first use."""
        if not self._directory_ready:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ExportError(
                    f"Export directory {self.directory} could not be created: {e}"
                ) from e
            self._directory_ready = True
        return self.directory

    def _record(self, path: Path) -> None:
        if path not in self.written:
            self.written.append(path)

    def export_system_parameters(self, system: SystemState, step: int, time: float) -> Path:
        """Write one row to ``{prefix}_system_parameters.csv``."""
        directory = self.ensure_directory()
        if self._parameters_stream is None:
            self._parameters_stream = ExportStream(
                path=directory / system_parameters_file_name(self.prefix),
                columns=SYSTEM_PARAMETERS_COLUMNS,
            )
        params = self.calculate_parameters(system)
        self._parameters_stream.write_row(step, system_parameters_row(step, time, params))
        self._record(self._parameters_stream.path)
        return self._parameters_stream.path

    def export_snapshot(self, system: SystemState, step: int, time: float) -> Path:
        """Write ``{prefix}_{step}.csv`` with one row per body."""
        path = self.ensure_directory() / snapshot_file_name(self.prefix, step)
        write_snapshot(path, system, time)
        self._record(path)
        return path

    def export_body_history(self, system: SystemState, step: int, time: float) -> List[Path]:
        """Write one row to each body's ``{prefix}_{body}.csv``.

        Stops at the first body whose file cannot be written.
        """
        directory = self.ensure_directory()
        paths = []
        for body in system:
            stream = self._body_streams.get(body.name)
            if stream is None:
                stream = ExportStream(
                    path=directory / body_history_file_name(self.prefix, body.name),
                    columns=BODY_HISTORY_COLUMNS,
                )
                self._body_streams[body.name] = stream
            stream.write_row(step, body_history_row(step, time, body))
            self._record(stream.path)
            paths.append(stream.path)
        return paths

    def export_tick(self, system: SystemState, step: int, time: float) -> List[Path]:
        """Run every enabled export for one telemetry tick.

        Order is fixed: system parameters, snapshot, body histories. The
        first failure propagates and the remaining streams are skipped.
        """
        paths = []
        if self.config.export_system_parameters_history:
            paths.append(self.export_system_parameters(system, step, time))
        if self.config.export_system_state:
            paths.append(self.export_snapshot(system, step, time))
        if self.config.export_body_history:
            paths.extend(self.export_body_history(system, step, time))
        return paths
