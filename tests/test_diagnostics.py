"""
Tests for physical diagnostics.

Validates:
1. Kinetic and potential energy formulas
2. Each pair counted once in the potential energy
3. Impulse and center of mass
4. Energy drift summary
"""

import numpy as np
import pytest

from kepler.bodies import Body, SystemState
from kepler.diagnostics import (
    center_of_mass,
    energy_drift,
    impulse,
    kinetic_energy,
    potential_energy,
    system_energy,
    system_parameters,
    total_kinetic_energy,
    total_potential_energy,
)
from kepler.mover import G


@pytest.fixture
def pair():
    return SystemState([
        Body("A", mass=1.0, position=[0, 0], velocity=[1, 0]),
        Body("B", mass=2.0, position=[2, 0], velocity=[0, 0.5]),
    ])


class TestEnergy:

    def test_kinetic(self, pair):
        assert kinetic_energy(pair[0]) == pytest.approx(0.5)
        assert total_kinetic_energy(pair) == pytest.approx(0.75)

    def test_potential_pair(self, pair):
        # -G * 1 * 2 / 2
        assert potential_energy(pair[0], pair[1]) == pytest.approx(-G)
        assert potential_energy(pair[1], pair[0]) == pytest.approx(-G)

    def test_potential_self_and_coincident(self, pair):
        twin = Body("A2", mass=5.0, position=[0, 0], velocity=[0, 0])

        assert potential_energy(pair[0], pair[0]) == 0.0
        assert potential_energy(pair[0], twin) == 0.0

    def test_each_pair_counted_once(self):
        system = SystemState([
            Body("A", 1.0, [0, 0], [0, 0]),
            Body("B", 1.0, [1, 0], [0, 0]),
            Body("C", 1.0, [0, 1], [0, 0]),
        ])
        expected = -G * (1.0 + 1.0 + 1.0 / np.sqrt(2.0))

        assert total_potential_energy(system) == pytest.approx(expected)

    def test_single_body_has_no_potential(self):
        system = SystemState([Body("A", 1.0, [3, 4], [1, 1])])
        assert total_potential_energy(system) == 0.0

    def test_total(self, pair):
        assert system_energy(pair) == pytest.approx(0.75 - G)

    def test_bound_orbit_negative(self, sun_earth):
        assert system_energy(sun_earth) < 0


class TestMomentumAndCenterOfMass:

    def test_impulse(self, pair):
        assert np.allclose(impulse(pair), [1.0, 1.0])

    def test_impulse_empty(self):
        assert np.array_equal(impulse(SystemState([])), [0.0, 0.0])

    def test_center_of_mass(self):
        system = SystemState([
            Body("A", 1.0, [0, 0], [0, 0]),
            Body("B", 3.0, [4, 8], [0, 0]),
        ])
        assert np.allclose(center_of_mass(system), [3.0, 6.0])

    def test_center_of_mass_empty(self):
        with pytest.raises(ValueError):
            center_of_mass(SystemState([]))

    def test_system_parameters(self, pair):
        params = system_parameters(pair)

        assert params.energy == pytest.approx(system_energy(pair))
        assert np.allclose(params.impulse, [1.0, 1.0])
        assert np.allclose(params.center_of_mass, [4.0 / 3.0, 0.0])


class TestEnergyDrift:

    def test_summary(self):
        drift = energy_drift([-10.0, -9.0, -11.5, -11.0])

        assert drift['E0'] == -10.0
        assert drift['Ef'] == -11.0
        assert drift['dE'] == pytest.approx(1.0)
        assert drift['dE_rel'] == pytest.approx(0.1)
        assert drift['dE_max'] == pytest.approx(1.5)

    def test_zero_initial_energy(self):
        assert energy_drift([0.0, 1.0])['dE_rel'] == np.inf

    def test_too_few_samples(self):
        with pytest.raises(ValueError):
            energy_drift([1.0])
