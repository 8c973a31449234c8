#!/usr/bin/env python3
"""
Command-line interface for the point-mass orbit simulator.

This script loads a YAML configuration, validates it, runs the simulation
and prints a short summary. Telemetry is written as CSV files (and an
optional SVG energy plot) to the configured export directory.

Usage:
    python -m kepler.run config.yaml
    python -m kepler.run config.yaml --verbose
    python -m kepler.run config.yaml --validate-only
    python -m kepler.run config.yaml --create-example

Exit codes:
    0    run completed (and plot rendered, if enabled)
    1    configuration error
    2    export failure, run aborted
    3    run completed, CSV output complete, plot rendering failed
    130  interrupted by the user
"""

import argparse
import logging
import sys
from typing import Optional

from kepler.diagnostics import energy_drift
from kepler.errors import ConfigurationError, ExportError
from kepler.io_cfg import create_example_config, load_config, validate_config
from kepler.progress import format_time
from kepler.simulation import RunResult, run_simulation

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_EXPORT_ERROR = 2
EXIT_PLOT_ERROR = 3
EXIT_INTERRUPTED = 130


def print_summary(result: RunResult, verbose: bool = False) -> None:
    """Print human-readable run summary."""
    print()
    print("=" * 80)
    print("SIMULATION SUMMARY")
    print("=" * 80)
    print()

    print("Integration:")
    print(f"  Total steps:        {result.last_step:,}")
    print(f"  Simulated time:     {result.time:.6e} s ({format_time(int(result.time))})")
    print()

    print(f"Files written ({len(result.written)}):")
    if verbose or len(result.written) <= 10:
        for path in result.written:
            print(f"  - {path}")
    else:
        for path in result.written[:5]:
            print(f"  - {path}")
        print(f"  ... and {len(result.written) - 5} more")
    print()

    if len(result.plot_samples) >= 2:
        drift = energy_drift([d.total_energy for d in result.plot_samples])
        print("Energy conservation:")
        print(f"  Initial energy:     {drift['E0']:+.10e}")
        print(f"  Final energy:       {drift['Ef']:+.10e}")
        print(f"  Relative drift:     {drift['dE_rel']:+.6e}")
        print()

    if result.plot_path is not None:
        print(f"Energy plot:          {result.plot_path}")
    elif result.plot_error is not None:
        print(f"⚠️  Energy plot failed: {result.plot_error}")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='kepler.run',
        description=(
            'Point-mass orbit simulator: integrate a planar N-body system and '
            'export its state as CSV files while it evolves.'
        ),
        epilog=(
            'Examples:\n'
            '  python -m kepler.run sun_earth.yaml\n'
            '  python -m kepler.run sun_earth.yaml --verbose\n'
            '  python -m kepler.run sun_earth.yaml --validate-only\n'
            '  python -m kepler.run sun_earth.yaml --create-example\n'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        'config',
        type=str,
        help='Path to YAML configuration file',
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging and list every written file',
    )

    parser.add_argument(
        '--validate-only',
        action='store_true',
        help='Validate configuration and exit (no simulation)',
    )

    parser.add_argument(
        '--create-example',
        action='store_true',
        help='Write an example configuration to CONFIG and exit',
    )

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    if args.create_example:
        path = create_example_config(args.config)
        print(f"Example configuration written to: {path}")
        return EXIT_OK

    # 1) Load configuration
    try:
        config, system = load_config(args.config)
    except ConfigurationError as e:
        print(f"ERROR: Failed to load configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    # 2) Validate configuration
    is_valid, messages = validate_config(config, system)

    if messages:
        print("⚠️  Configuration warnings/errors:")
        for message in messages:
            print(f"    - {message}")
        print()

    if not is_valid:
        print("❌ Configuration is INVALID. Please fix errors above.", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.validate_only:
        print("✓ Configuration validated successfully. Exiting (--validate-only mode).")
        return EXIT_OK

    print(config)
    print(system)
    print()

    # 3) Run simulation
    try:
        result = run_simulation(config, system)
    except ExportError as e:
        print(f"\nERROR: Simulation aborted: {e}", file=sys.stderr)
        return EXIT_EXPORT_ERROR
    except KeyboardInterrupt:
        print("\n\nSimulation interrupted by user.", file=sys.stderr)
        return EXIT_INTERRUPTED

    # 4) Summary
    print_summary(result, verbose=args.verbose)

    if result.plot_failed:
        return EXIT_PLOT_ERROR

    print()
    print("✓ Simulation complete!")
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
