"""Diagnostics module for the point-mass orbit simulator.

This module provides the physical quantity calculators used by the export
and plotting layers. All functions are pure functions of a SystemState.

Key diagnostics:
- Kinetic energy: T = Σ (1/2) M_a v_a²
- Gravitational potential energy: U = -G Σ_{a<b} M_a M_b / r_ab
- Total energy: E = T + U (conserved up to integrator error)
- Impulse (total linear momentum): p = Σ M_a v_a
- Center of mass: R = Σ M_a x_a / Σ M_a
"""

from dataclasses import dataclass
from typing import Dict, Sequence
import numpy as np

from kepler.bodies import Body, SystemState
from kepler.mover import G


def kinetic_energy(body: Body) -> float:
    """Kinetic energy of one body, (1/2) M v²."""
    return 0.5 * body.mass * float(np.dot(body.velocity, body.velocity))


def total_kinetic_energy(system: SystemState) -> float:
    """Compute total kinetic energy of the system.

    Formula:
        T = Σ_a (1/2) M_a v_a²

    Examples
    --------
    >>> system = SystemState([
    ...     Body("A", mass=1.0, position=[0, 0], velocity=[1, 0]),
    ...     Body("B", mass=2.0, position=[1, 0], velocity=[0, 0.5]),
    ... ])
    >>> total_kinetic_energy(system)
    0.75
    """
    return float(sum(kinetic_energy(body) for body in system))


def potential_energy(body: Body, other: Body) -> float:
    """Gravitational potential energy of one pair, -G M_a M_b / r_ab.

    Returns 0.0 when both arguments are the same body or the bodies
    coincide, so callers can sum over all pairs without special cases.
    """
    if body is other:
        return 0.0
    r = float(np.linalg.norm(other.position - body.position))
    if r == 0.0:
        return 0.0
    return -G * body.mass * other.mass / r


def total_potential_energy(system: SystemState) -> float:
    """Compute gravitational potential energy summed over unordered pairs.

    Formula:
        U = -G Σ_{a<b} M_a M_b / r_ab

    Notes
    -----
    Each pair is counted once. For N=1 body, returns 0.0.
    """
    bodies = system.bodies
    U = 0.0
    for i in range(len(bodies)):
        for j in range(i + 1, len(bodies)):
            U += potential_energy(bodies[i], bodies[j])
    return U


def system_energy(system: SystemState) -> float:
    """Total energy E = T + U.

    For bound systems E < 0. Monitoring |ΔE|/|E| over a run checks
    integrator quality.
    """
    return total_kinetic_energy(system) + total_potential_energy(system)


def impulse(system: SystemState) -> np.ndarray:
    """Total linear momentum p = Σ M_a v_a, shape (2,)."""
    if len(system) == 0:
        return np.zeros(2)
    return np.sum(system.masses[:, np.newaxis] * system.velocities, axis=0)


def center_of_mass(system: SystemState) -> np.ndarray:
    """Center of mass R = Σ M_a x_a / Σ M_a, shape (2,).

    Raises
    ------
    ValueError
        If the system has no bodies.
    """
    if len(system) == 0:
        raise ValueError("Center of mass is undefined for an empty system")
    masses = system.masses
    return np.sum(masses[:, np.newaxis] * system.positions, axis=0) / masses.sum()


@dataclass(frozen=True)
class SystemParameters:
    """Aggregated system-wide quantities at one instant."""

    energy: float
    impulse: np.ndarray
    center_of_mass: np.ndarray


def system_parameters(system: SystemState) -> SystemParameters:
    """Compute energy, impulse and center of mass in one call."""
    return SystemParameters(
        energy=system_energy(system),
        impulse=impulse(system),
        center_of_mass=center_of_mass(system),
    )


def energy_drift(energies: Sequence[float]) -> Dict[str, float]:
    """Summarize energy drift over a sequence of samples.

    Returns
    -------
    dict
        - 'E0': initial energy
        - 'Ef': final energy
        - 'dE': absolute drift |Ef - E0|
        - 'dE_rel': relative drift |ΔE|/|E₀| (inf if E₀ == 0)
        - 'dE_max': maximum absolute deviation from E₀

    Raises
    ------
    ValueError
        With fewer than 2 samples.
    """
    if len(energies) < 2:
        raise ValueError("Need at least 2 samples to compute energy drift")

    energies = np.asarray(energies, dtype=float)
    E0 = float(energies[0])
    Ef = float(energies[-1])
    dE = abs(Ef - E0)

    return {
        'E0': E0,
        'Ef': Ef,
        'dE': dE,
        'dE_rel': dE / abs(E0) if E0 != 0 else np.inf,
        'dE_max': float(np.max(np.abs(energies - E0))),
    }
