"""Risk-aware drone route planning over a dynamic hazard grid."""

from drone_pathfinder.config import SimParams
from drone_pathfinder.models import GeoGrid, HazardCell, LatLng, MissionStatus, WeatherKind, WeatherSystem
from drone_pathfinder.mission import EventKind, MissionDriver, MissionEvent
from drone_pathfinder.planner import RoutePlanner
from drone_pathfinder.session import SimulationContext
from drone_pathfinder.terrain import ObstacleField
from drone_pathfinder.weather import HazardField

__all__ = [
    "EventKind", "GeoGrid", "HazardCell", "HazardField", "LatLng", "MissionDriver",
    "MissionEvent", "MissionStatus", "ObstacleField", "RoutePlanner", "SimParams",
    "SimulationContext", "WeatherKind", "WeatherSystem",
]

__version__ = "0.1.0"
