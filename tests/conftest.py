"""
Pytest fixtures shared across the drone_pathfinder test modules.

Grids used here map one degree to one cell: a 20x20 grid over lat 0..20,
lng 0..20 puts cell (x, y) at centre (lat=y+0.5, lng=x+0.5).
"""

import os
import sys

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from drone_pathfinder.config import SimParams  # noqa: E402
from drone_pathfinder.models import GeoGrid, WeatherKind, WeatherSystem  # noqa: E402
from drone_pathfinder.planner import RoutePlanner  # noqa: E402
from drone_pathfinder.terrain import ObstacleField  # noqa: E402
from drone_pathfinder.weather import HazardField  # noqa: E402


# =============================================================================
# Grid / parameter fixtures
# =============================================================================


@pytest.fixture
def quiet_params():
    """Parameters with the wind perturbation switched off"""
    return SimParams(grid_size=20, wind_noise=0.0)


@pytest.fixture
def grid20():
    return GeoGrid.from_bounds(0.0, 20.0, 0.0, 20.0, 20)


@pytest.fixture
def grid10():
    return GeoGrid.from_bounds(0.0, 10.0, 0.0, 10.0, 10)


# =============================================================================
# Field fixtures
# =============================================================================


@pytest.fixture
def calm_weather(grid20, quiet_params):
    """Weather field with no systems: zero risk everywhere"""
    return HazardField(grid20, quiet_params, systems=[])


@pytest.fixture
def terrain20(grid20, quiet_params):
    return ObstacleField(grid20, quiet_params)


@pytest.fixture
def planner20(grid20, terrain20, calm_weather):
    return RoutePlanner(grid20, terrain20, calm_weather)


@pytest.fixture
def storm_at_center():
    return WeatherSystem(x=5.0, y=5.0, radius=5.0, kind=WeatherKind.STORM, intensity=1.0)


@pytest.fixture
def events():
    """Collects mission events; pass events.append as a listener"""
    return []
