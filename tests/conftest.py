"""Shared fixtures for the orbit simulator tests."""

import pytest
import yaml

from kepler.bodies import Body, SystemState
from kepler.io_cfg import RunConfig
from kepler.mover import circular_orbit_speed

M_SUN = 1.989e30
M_EARTH = 5.972e24
AU = 1.495978707e11


@pytest.fixture
def sun_earth():
    """Sun at rest at the origin, Earth on a circular orbit at 1 AU."""
    return SystemState([
        Body("Sun", M_SUN, [0.0, 0.0], [0.0, 0.0]),
        Body("Earth", M_EARTH, [AU, 0.0], [0.0, circular_orbit_speed(M_SUN, AU)]),
    ])


@pytest.fixture
def make_config(tmp_path):
    """Factory for RunConfig pointing at a fresh export directory."""

    def _make(**overrides):
        values = dict(
            timestep=3600.0,
            steps=2,
            export_step=1,
            export_directory=str(tmp_path / "out"),
            export_file_name_prefix="test",
        )
        values.update(overrides)
        return RunConfig(**values)

    return _make


@pytest.fixture
def write_yaml(tmp_path):
    """Dump a mapping to a YAML file under tmp_path and return its path."""

    def _write(data, name="config.yaml"):
        path = tmp_path / name
        with open(path, "w") as f:
            yaml.safe_dump(data, f)
        return path

    return _write


def _config_document(export_directory, **config_overrides):
    """Minimal valid configuration document for a two-body system."""
    config = {
        "timestep": 3600.0,
        "steps": 4,
        "export_step": 2,
        "export_directory": str(export_directory),
        "export_file_name_prefix": "run",
        "export_body_history": True,
    }
    config.update(config_overrides)
    return {
        "config": config,
        "system": {
            "bodies": [
                {"name": "Sun", "mass": M_SUN, "position": [0.0, 0.0], "velocity": [0.0, 0.0]},
                {
                    "name": "Earth",
                    "mass": M_EARTH,
                    "position": [AU, 0.0],
                    "velocity": [0.0, circular_orbit_speed(M_SUN, AU)],
                },
            ]
        },
    }


@pytest.fixture
def config_document():
    """Factory for configuration documents, see _config_document."""
    return _config_document
