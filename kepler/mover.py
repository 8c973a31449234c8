"""
Time integration module for the point-mass orbit simulator.

This module implements symplectic velocity-Verlet (leapfrog) integration for
planar N-body dynamics under Newtonian gravity.

Integration scheme:
1. Compute accelerations a(t) at current positions
2. Half-step velocities: v += 0.5 * a(t) * dt
3. Full-step positions: x += v * dt
4. Recompute accelerations a(t+dt) at new positions
5. Half-step velocities: v += 0.5 * a(t+dt) * dt

The integrator is a pure function: it never mutates the state it is given and
always returns a new SystemState.
"""

import numpy as np
from numpy.typing import NDArray

from kepler.bodies import SystemState

# Newtonian gravitational constant [m³/(kg·s²)], CODATA 2018
G = 6.67430e-11

# Type aliases
Positions = NDArray[np.float64]  # Shape (N, 2)
Accelerations = NDArray[np.float64]  # Shape (N, 2)


def accelerations(positions: Positions, masses: NDArray[np.float64]) -> Accelerations:
    """
    Pairwise Newtonian accelerations for all bodies.

        a_i = Σ_{j≠i} G * M_j * (x_j - x_i) / |x_j - x_i|³

    Parameters
    ----------
    positions : ndarray, shape (N, 2)
        Body positions [m].
    masses : ndarray, shape (N,)
        Body masses [kg].

    Returns
    -------
    ndarray, shape (N, 2)
        Acceleration of each body [m/s²].

    Notes
    -----
    Coincident bodies (zero separation) contribute nothing to each other's
    acceleration instead of producing inf/NaN.

    Examples
    --------
    >>> x = np.array([[0.0, 0.0], [1.0, 0.0]])
    >>> m = np.array([1.0 / G, 1.0 / G])
    >>> accelerations(x, m)
    array([[ 1.,  0.],
           [-1.,  0.]])
    """
    # r_ij = x_j - x_i, shape (N, N, 2)
    r = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
    dist = np.linalg.norm(r, axis=-1)

    inv_d3 = np.zeros_like(dist)
    nonzero = dist > 0.0
    inv_d3[nonzero] = dist[nonzero] ** -3

    return G * np.einsum("ij,ijk->ik", inv_d3 * masses[np.newaxis, :], r)


def system_timestep(system: SystemState, timestep: float) -> SystemState:
    """
    Single velocity-Verlet (kick-drift-kick) timestep.

        v(t+dt/2) = v(t) + 0.5 * a(t) * dt
        x(t+dt)   = x(t) + v(t+dt/2) * dt
        v(t+dt)   = v(t+dt/2) + 0.5 * a(t+dt) * dt

    Parameters
    ----------
    system : SystemState
        Current state. Not modified.
    timestep : float
        Timestep size [s].

    Returns
    -------
    SystemState
        New state one timestep later, bodies in the same order.

    Examples
    --------
    >>> from kepler.bodies import Body
    >>> state = SystemState([Body("A", 1.0, [0.0, 0.0], [1.0, 0.0])])
    >>> system_timestep(state, 2.0)[0].position
    array([2., 0.])
    """
    masses = system.masses
    x = system.positions
    v = system.velocities

    v_half = v + 0.5 * accelerations(x, masses) * timestep
    x_new = x + v_half * timestep
    v_new = v_half + 0.5 * accelerations(x_new, masses) * timestep

    return SystemState.from_arrays(system.names, masses, x_new, v_new)


def circular_orbit_speed(central_mass: float, radius: float) -> float:
    """Speed of a test body on a circular orbit, v = sqrt(G*M/r)."""
    return float(np.sqrt(G * central_mass / radius))
