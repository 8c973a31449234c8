"""Configuration module for the point-mass orbit simulator.

This module provides:
- YAML configuration loading into a RunConfig and an initial SystemState
- Pre-flight validation returning errors and warnings
- Example config generation

A configuration file has two sections: ``config`` (run parameters and
export toggles) and ``system`` (the bodies and their initial conditions).
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union
import re

import yaml

from kepler.bodies import Body, SystemState
from kepler.errors import ConfigurationError
from kepler.mover import circular_orbit_speed

PathLike = Union[str, Path]

# Body names become part of per-body export file names
_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 _.+-]*$")
# {prefix}_{step}.csv and {prefix}_system_parameters.csv share the per-body pattern
_RESERVED_NAMES = ("system_parameters",)


@dataclass(frozen=True)
class RunConfig:
    """Run parameters, fixed for the whole duration of a run.

    Attributes
    ----------
    timestep : float
        Seconds of simulated time per step (> 0).
    steps : int
        Total number of integration steps (>= 0).
    export_step : int
        Telemetry cadence in steps (> 0).
    export_directory : str
        Target directory for all output files, created if absent.
    export_file_name_prefix : str
        Prefix used to derive every output file name.
    export_system_state : bool
        Write one full-system snapshot file per telemetry tick.
    export_body_history : bool
        Append one row per tick to a history file per body.
    export_system_parameters_history : bool
        Append one row per tick to the aggregated system-parameters file.
    plot_system : bool
        Render the energy plot at the end of a successful run.
    plot_system_kinetic_energy : bool
        Include the kinetic energy series in the plot.
    plot_system_potential_energy : bool
        Include the potential energy series in the plot.
    """

    timestep: float
    steps: int
    export_step: int
    export_directory: str
    export_file_name_prefix: str
    export_system_state: bool = False
    export_body_history: bool = False
    export_system_parameters_history: bool = False
    plot_system: bool = False
    plot_system_kinetic_energy: bool = False
    plot_system_potential_energy: bool = False

    @property
    def any_export(self) -> bool:
        """True if at least one CSV export stream is enabled."""
        return (
            self.export_system_state
            or self.export_body_history
            or self.export_system_parameters_history
        )

    @property
    def export_path(self) -> Path:
        return Path(self.export_directory)

    def __str__(self) -> str:
        lines = ["RunConfig:"]
        for f in fields(self):
            lines.append(f"  {f.name:34s} {getattr(self, f.name)!r}")
        return "\n".join(lines)


_REQUIRED = {
    'timestep': float,
    'steps': int,
    'export_step': int,
    'export_directory': str,
    'export_file_name_prefix': str,
}
_TOGGLES = (
    'export_system_state',
    'export_body_history',
    'export_system_parameters_history',
    'plot_system',
    'plot_system_kinetic_energy',
    'plot_system_potential_energy',
)


def _coerce(key: str, value: Any, expected: type) -> Any:
    """Check a scalar config value against its expected type."""
    # bool is a subclass of int, never accept it for numeric fields
    if isinstance(value, bool) and expected is not bool:
        raise ConfigurationError(f"'{key}' must be {expected.__name__}, got bool")
    if expected is float:
        # YAML 1.1 reads exponents without a sign (1e30) as strings
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                pass
        if not isinstance(value, (int, float)):
            raise ConfigurationError(f"'{key}' must be a number, got {value!r}")
        return float(value)
    if not isinstance(value, expected):
        raise ConfigurationError(
            f"'{key}' must be {expected.__name__}, got {type(value).__name__} {value!r}"
        )
    return value


def parse_run_config(raw: Mapping[str, Any]) -> RunConfig:
    """Build a RunConfig from the ``config`` section of a parsed document."""
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Section 'config' must be a mapping")

    unknown = set(raw) - set(_REQUIRED) - set(_TOGGLES)
    if unknown:
        raise ConfigurationError(f"Unknown config option(s): {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = {}
    for key, expected in _REQUIRED.items():
        if key not in raw:
            raise ConfigurationError(f"Configuration missing required field '{key}'")
        values[key] = _coerce(key, raw[key], expected)
    for key in _TOGGLES:
        # Unset booleans default to false
        values[key] = _coerce(key, raw.get(key, False), bool)

    return RunConfig(**values)


def parse_system(raw: Mapping[str, Any]) -> SystemState:
    """Build the initial SystemState from the ``system`` section."""
    if not isinstance(raw, Mapping) or 'bodies' not in raw:
        raise ConfigurationError("Section 'system' must be a mapping with a 'bodies' list")

    bodies_cfg = raw['bodies']
    if not isinstance(bodies_cfg, list):
        raise ConfigurationError("'system.bodies' must be a list")

    bodies = []
    for i, body_cfg in enumerate(bodies_cfg):
        if not isinstance(body_cfg, Mapping):
            raise ConfigurationError(f"Body {i} must be a mapping")
        try:
            bodies.append(Body(
                name=body_cfg['name'],
                mass=body_cfg['mass'],
                position=body_cfg['position'],
                velocity=body_cfg['velocity'],
            ))
        except KeyError as e:
            raise ConfigurationError(f"Body {i} missing required field {e}") from e
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Body {i} ('{body_cfg.get('name', 'unnamed')}'): {e}") from e

    return SystemState(bodies)


def load_config(yaml_path: PathLike) -> Tuple[RunConfig, SystemState]:
    """Load and parse a YAML configuration file.

    Parameters
    ----------
    yaml_path : str or Path
        Path to YAML configuration file.

    Returns
    -------
    config : RunConfig
        Run parameters and export toggles.
    system : SystemState
        Initial state of the simulated system.

    Raises
    ------
    ConfigurationError
        If the file cannot be read, is not valid YAML, or does not match
        the expected layout (missing sections/fields, wrong types, invalid
        bodies).

    Examples
    --------
    >>> config, system = load_config("sun_earth.yaml")
    >>> print(f"Loaded {len(system)} bodies, {config.steps} steps")
    Loaded 2 bodies, 8760 steps

    See Also
    --------
    validate_config : Semantic checks on a loaded configuration
    create_example_config : Generate an example YAML file
    """
    yaml_path = Path(yaml_path)
    try:
        with open(yaml_path, 'r') as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {yaml_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {yaml_path}: {e}") from e

    if raw is None:
        raise ConfigurationError(f"Empty configuration file: {yaml_path}")
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Top level of {yaml_path} must be a mapping")

    for section in ('config', 'system'):
        if section not in raw:
            raise ConfigurationError(f"Configuration missing required section '{section}'")

    return parse_run_config(raw['config']), parse_system(raw['system'])


def validate_config(config: RunConfig, system: SystemState) -> Tuple[bool, List[str]]:
    """Validate a loaded configuration before running it.

    Returns
    -------
    is_valid : bool
        False if any check would make the run meaningless or break exports.
    messages : list of str
        Errors and warnings, in the order they were found.

    Notes
    -----
    **Errors** (is_valid becomes False):

    1. timestep <= 0, steps < 0, export_step <= 0
    2. Empty export directory or file name prefix
    3. Empty system
    4. Duplicate body names (per-body history files are keyed by name)
    5. Body names that are unsafe as file name components
    6. Body names that collide with snapshot or system-parameters file names

    **Warnings**:

    1. export_step > steps: only the initial state is exported
    2. steps not a multiple of export_step: the final state is not exported
    3. Kinetic/potential plot toggles without plot_system
    4. Plotting enabled with every CSV export disabled
    """
    messages = []
    is_valid = True

    if config.timestep <= 0:
        is_valid = False
        messages.append(f"timestep must be positive, got {config.timestep}")
    if config.steps < 0:
        is_valid = False
        messages.append(f"steps must be non-negative, got {config.steps}")
    if config.export_step <= 0:
        is_valid = False
        messages.append(f"export_step must be positive, got {config.export_step}")
    if not config.export_directory.strip():
        is_valid = False
        messages.append("export_directory must not be empty")
    if not config.export_file_name_prefix.strip():
        is_valid = False
        messages.append("export_file_name_prefix must not be empty")

    if len(system) == 0:
        is_valid = False
        messages.append("System must contain at least one body")

    seen = set()
    for name in system.names:
        if name in seen:
            is_valid = False
            messages.append(f"Duplicate body name '{name}'")
        seen.add(name)
        if not _SAFE_NAME.match(name):
            is_valid = False
            messages.append(f"Body name '{name}' cannot be used in an export file name")
        elif name.isdigit() or name in _RESERVED_NAMES:
            is_valid = False
            messages.append(
                f"Body name '{name}' collides with another export file name"
            )

    if config.export_step > 0 and config.steps >= 0:
        if config.export_step > config.steps:
            messages.append(
                f"export_step ({config.export_step}) > steps ({config.steps}): "
                f"only the initial state will be exported"
            )
        elif config.steps % config.export_step != 0:
            messages.append(
                f"steps ({config.steps}) is not a multiple of export_step "
                f"({config.export_step}): the final state will not be exported"
            )

    if not config.plot_system and (
        config.plot_system_kinetic_energy or config.plot_system_potential_energy
    ):
        messages.append(
            "plot_system_kinetic_energy/plot_system_potential_energy have no effect "
            "without plot_system"
        )
    if config.plot_system and not config.any_export:
        messages.append("Plotting is enabled but no CSV export is enabled")

    return is_valid, messages


def create_example_config(output_path: PathLike) -> Path:
    """Generate an example YAML configuration file.

    Creates a commented Sun-Earth configuration integrating one year with
    an hourly timestep and daily exports.

    Returns
    -------
    Path
        The written file.
    """
    M_sun = 1.989e30
    M_earth = 5.972e24
    a = 1.495978707e11  # 1 AU [m]
    v_earth = circular_orbit_speed(M_sun, a)

    yaml_content = f"""# Orbit simulator configuration
# Sun-Earth example: one year with a one hour timestep.

config:
  # Seconds of simulated time per step
  timestep: 3600.0

  # Number of steps (24 * 365 = one year)
  steps: 8760

  # Export every N steps (24 = once per simulated day)
  export_step: 24

  # Output location; created if absent
  export_directory: output
  export_file_name_prefix: sun_earth

  # One file per export step with every body ({{prefix}}_{{step}}.csv)
  export_system_state: false

  # One growing file per body ({{prefix}}_{{body}}.csv)
  export_body_history: true

  # Energy, impulse and center of mass ({{prefix}}_system_parameters.csv)
  export_system_parameters_history: true

  # Energy plot written after the run ({{prefix}}_Energy.svg)
  plot_system: true
  plot_system_kinetic_energy: true
  plot_system_potential_energy: true

system:
  bodies:
    - name: Sun
      mass: {M_sun}
      position: [0.0, 0.0]
      velocity: [0.0, 0.0]

    - name: Earth
      mass: {M_earth}
      position: [{a}, 0.0]
      velocity: [0.0, {v_earth}]
"""

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        f.write(yaml_content)

    return output_path
