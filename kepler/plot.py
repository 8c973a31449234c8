"""Energy plot for the orbit simulator.

One PlotDatum is collected per telemetry tick while the run is in progress.
After a successful run the samples are rendered into a single SVG chart:
- Total energy (always, red)
- Potential energy (optional, blue)
- Kinetic energy (optional, green)

Rendering failures are raised as PlotRenderingError. They never affect the
CSV output of the run.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple
import math

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.ticker import FuncFormatter

from kepler.errors import PlotRenderingError

PADDING = 0.05

TOTAL_ENERGY_COLOR = "red"
POTENTIAL_ENERGY_COLOR = "blue"
KINETIC_ENERGY_COLOR = "green"


@dataclass(frozen=True)
class PlotDatum:
    """Energy sample at one telemetry tick.

    kinetic_energy and potential_energy are None when their series is not
    being plotted.
    """

    time: float
    total_energy: float
    kinetic_energy: Optional[float] = None
    potential_energy: Optional[float] = None


def format_label(number: float, _pos=None) -> str:
    """Tick label: scientific notation for very large or very small magnitudes.

    Examples
    --------
    >>> format_label(123.4567)
    '123.457'
    >>> format_label(2.5e9)
    '2.50e+09'
    >>> format_label(-3e-6)
    '-3.00e-06'
    """
    magnitude = abs(number)
    if magnitude >= 1e5 or magnitude < 1e-5:
        return f"{number:.2e}"
    return f"{number:.3f}"


def pad_outward(low: float, high: float) -> Tuple[float, float]:
    """Widen [low, high] by 5% of each bound's magnitude."""
    return low - abs(low) * PADDING, high + abs(high) * PADDING


def legend_location(plot_kinetic: bool, plot_potential: bool) -> str:
    """Keep the legend between the curves when both components are drawn."""
    if plot_kinetic and plot_potential:
        return "center right"
    return "upper right"


class PlotAggregator:
    """Append-only sequence of PlotDatum for one run.

    Parameters
    ----------
    plot_kinetic : bool
        Whether the kinetic energy series is drawn.
    plot_potential : bool
        Whether the potential energy series is drawn.
    """

    def __init__(self, plot_kinetic: bool = False, plot_potential: bool = False):
        self.plot_kinetic = plot_kinetic
        self.plot_potential = plot_potential
        self._samples: List[PlotDatum] = []

    @classmethod
    def from_config(cls, config) -> "PlotAggregator":
        return cls(
            plot_kinetic=config.plot_system_kinetic_energy,
            plot_potential=config.plot_system_potential_energy,
        )

    def append(self, datum: PlotDatum) -> None:
        self._samples.append(datum)

    @property
    def samples(self) -> Tuple[PlotDatum, ...]:
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PlotDatum]:
        return iter(self._samples)

    def series(self) -> List[Tuple[str, str, List[float]]]:
        """(label, color, values) for every series to draw, total energy first.

        Raises
        ------
        PlotRenderingError
            If an enabled optional series is missing on any sample.
        """
        series = [("Total Energy", TOTAL_ENERGY_COLOR, [d.total_energy for d in self._samples])]
        if self.plot_potential:
            series.append((
                "Potential Energy",
                POTENTIAL_ENERGY_COLOR,
                _required_values(self._samples, "potential_energy"),
            ))
        if self.plot_kinetic:
            series.append((
                "Kinetic Energy",
                KINETIC_ENERGY_COLOR,
                _required_values(self._samples, "kinetic_energy"),
            ))
        return series

    def axis_bounds(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Compute ((x_min, x_max), (y_min, y_max)) for the chart.

        The lower time bound is padded, the upper is not so the last sample
        sits on the border. The energy range covers every drawn series and
        is padded on both ends.

        Raises
        ------
        PlotRenderingError
            No samples, non-finite values, or an empty range on either axis.
        """
        if not self._samples:
            raise PlotRenderingError("No samples to plot")

        times = [d.time for d in self._samples]
        x_min = min(times)
        x_min -= abs(x_min) * PADDING
        x_max = max(times)

        y_min, y_max = math.inf, -math.inf
        for label, _, values in self.series():
            # min/max silently skip NaN
            if not all(math.isfinite(v) for v in values):
                raise PlotRenderingError(f"{label} has non-finite values")
            low, high = pad_outward(min(values), max(values))
            y_min = min(y_min, low)
            y_max = max(y_max, high)

        bounds = ((x_min, x_max), (y_min, y_max))
        for axis, (low, high) in zip(("time", "energy"), bounds):
            if not (math.isfinite(low) and math.isfinite(high)) or low >= high:
                raise PlotRenderingError(
                    f"Invalid {axis} axis range [{low}, {high}]"
                )
        return bounds

    def render(self, output_path, dpi: int = 100) -> Path:
        """Draw the energy chart and save it as SVG.

        Parameters
        ----------
        output_path : str or Path
            Destination file; its directory must be writable.
        dpi : int, optional
            Figure resolution, 640x480 pixels at the default of 100.

        Returns
        -------
        Path
            The written file.
        """
        (x_min, x_max), (y_min, y_max) = self.axis_bounds()
        series = self.series()
        times = [d.time for d in self._samples]

        output_path = Path(output_path)
        fig = None
        try:
            fig, ax = plt.subplots(figsize=(6.4, 4.8), dpi=dpi)
            for label, color, values in series:
                ax.plot(times, values, color=color, linewidth=1.5, label=label)

            ax.set_xlim(x_min, x_max)
            ax.set_ylim(y_min, y_max)
            ax.xaxis.set_major_formatter(FuncFormatter(format_label))
            ax.yaxis.set_major_formatter(FuncFormatter(format_label))
            ax.locator_params(nbins=6)

            ax.set_xlabel('Time (s)', fontsize=12)
            ax.set_ylabel('Energy (J)', fontsize=12)
            ax.set_title('System Energy over Time', fontsize=14)
            ax.legend(
                loc=legend_location(self.plot_kinetic, self.plot_potential),
                edgecolor='black',
                fontsize=10,
            )
            ax.grid(True, alpha=0.3)

            fig.tight_layout()
            fig.savefig(output_path, format='svg')
        except Exception as e:
            raise PlotRenderingError(f"Could not render {output_path}: {e}") from e
        finally:
            if fig is not None:
                plt.close(fig)

        return output_path


def _required_values(samples: Sequence[PlotDatum], attribute: str) -> List[float]:
    values = []
    for datum in samples:
        value = getattr(datum, attribute)
        if value is None:
            raise PlotRenderingError(
                f"Sample at time {datum.time} has no {attribute.replace('_', ' ')}"
            )
        values.append(value)
    return values
