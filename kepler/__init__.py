"""Point-mass orbit simulator with incremental CSV telemetry export.

The package is split into:
- bodies: Body and SystemState data model
- mover: velocity-Verlet integrator (Newtonian gravity, 2D)
- diagnostics: energy, impulse and center-of-mass calculators
- io_cfg: YAML configuration loading and validation
- export: on-disk lifecycle of the CSV export streams
- plot: energy plot aggregation and rendering
- progress: time formatting and run reporters
- simulation: the run loop
- run: command-line interface
"""

__version__ = "0.3.0"
