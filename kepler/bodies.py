"""Body and SystemState data model for the point-mass orbit simulator.

A system is an ordered sequence of point masses moving in a plane. Each body has:
- A name, used as identifier and as part of per-body export file names
- A mass M (positive, finite)
- Position x and velocity v (2D vectors)

States are never mutated by the integrator: every timestep produces a new
SystemState built from new Body instances.
"""

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple
import numpy as np


@dataclass
class Body:
    """A point mass in the simulated system.

    Attributes
    ----------
    name : str
        Identifier for this body (e.g., "Sun", "Earth").
    mass : float
        Mass [kg].
    position : np.ndarray
        Position vector [m], shape (2,).
    velocity : np.ndarray
        Velocity vector [m/s], shape (2,).

    Examples
    --------
    >>> earth = Body("Earth", mass=5.972e24, position=[1.496e11, 0.0],
    ...              velocity=[0.0, 2.978e4])
    >>> print(earth)
    Body 'Earth': M=5.972e+24
      x = [1.496e+11, 0.000e+00]
      v = [0.000e+00, 2.978e+04]
    """

    name: str
    mass: float
    position: np.ndarray
    velocity: np.ndarray

    def __post_init__(self):
        """Validate body parameters and ensure vectors are float numpy arrays."""
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"Body name must be a non-empty string, got {self.name!r}")

        self.mass = float(self.mass)
        self.position = np.array(self.position, dtype=float)
        self.velocity = np.array(self.velocity, dtype=float)

        if self.position.shape != (2,):
            raise ValueError(
                f"Body '{self.name}': position must have shape (2,), got {self.position.shape}"
            )
        if self.velocity.shape != (2,):
            raise ValueError(
                f"Body '{self.name}': velocity must have shape (2,), got {self.velocity.shape}"
            )
        if not np.isfinite(self.mass) or self.mass <= 0:
            raise ValueError(f"Body '{self.name}': mass must be positive, got {self.mass}")

    def copy(self) -> "Body":
        """Return an independent copy (vectors are copied)."""
        return Body(
            name=self.name,
            mass=self.mass,
            position=self.position.copy(),
            velocity=self.velocity.copy(),
        )

    def __str__(self) -> str:
        lines = [f"Body '{self.name}': M={self.mass:.3e}"]
        lines.append(f"  x = [{self.position[0]:.3e}, {self.position[1]:.3e}]")
        lines.append(f"  v = [{self.velocity[0]:.3e}, {self.velocity[1]:.3e}]")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Body(name={self.name!r}, mass={self.mass!r}, "
            f"position={self.position!r}, velocity={self.velocity!r})"
        )


class SystemState:
    """Ordered, read-only collection of bodies at one instant.

    The body order is significant: it fixes the row order of snapshot
    exports and the order in which per-body streams are written.

    Parameters
    ----------
    bodies : sequence of Body
        Bodies making up the system. The sequence is copied into a tuple;
        the Body objects themselves are not copied.
    """

    __slots__ = ("_bodies",)

    def __init__(self, bodies: Sequence[Body]):
        self._bodies: Tuple[Body, ...] = tuple(bodies)

    @classmethod
    def from_arrays(
        cls,
        names: Sequence[str],
        masses: np.ndarray,
        positions: np.ndarray,
        velocities: np.ndarray,
    ) -> "SystemState":
        """Build a state from per-body arrays (shape (N,), (N, 2), (N, 2))."""
        return cls([
            Body(name=name, mass=m, position=x, velocity=v)
            for name, m, x, v in zip(names, masses, positions, velocities)
        ])

    @property
    def bodies(self) -> Tuple[Body, ...]:
        return self._bodies

    @property
    def names(self) -> List[str]:
        return [body.name for body in self._bodies]

    @property
    def masses(self) -> np.ndarray:
        """Masses, shape (N,)."""
        return np.array([body.mass for body in self._bodies], dtype=float)

    @property
    def positions(self) -> np.ndarray:
        """Positions, shape (N, 2)."""
        return np.array([body.position for body in self._bodies], dtype=float).reshape(-1, 2)

    @property
    def velocities(self) -> np.ndarray:
        """Velocities, shape (N, 2)."""
        return np.array([body.velocity for body in self._bodies], dtype=float).reshape(-1, 2)

    @property
    def total_mass(self) -> float:
        return float(sum(body.mass for body in self._bodies))

    def copy(self) -> "SystemState":
        """Deep copy: new Body instances with copied vectors."""
        return SystemState([body.copy() for body in self._bodies])

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(self._bodies)

    def __getitem__(self, index: int) -> Body:
        return self._bodies[index]

    def __str__(self) -> str:
        lines = [f"System ({len(self)} bodies):"]
        for body in self._bodies:
            lines.append(str(body))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"SystemState({list(self._bodies)!r})"
