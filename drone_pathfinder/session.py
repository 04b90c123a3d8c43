"""
Simulation context: everything one planning session owns, in one object.

The context is the single writer for its hazard fields. The weather tick and
the mission tick are two independent periodic tasks on its scheduler; ending
a mission cancels only the mission task.
"""

import logging
from typing import Callable, Optional

from drone_pathfinder.config import DEFAULT_PARAMS, SimParams
from drone_pathfinder.energy import BatteryParams
from drone_pathfinder.metrics import RouteReport, analyze_route
from drone_pathfinder.mission import EventKind, MissionDriver, MissionEvent
from drone_pathfinder.models import GeoGrid, HazardCell, LatLng, MissionState, MissionStatus, Route
from drone_pathfinder.planner import RoutePlanner
from drone_pathfinder.scheduler import PeriodicTask, Scheduler
from drone_pathfinder.terrain import ObstacleField
from drone_pathfinder.weather import HazardField

logger = logging.getLogger(__name__)


class SimulationContext:
    def __init__(
        self,
        grid: GeoGrid,
        params: SimParams = DEFAULT_PARAMS,
        weather: Optional[HazardField] = None,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        if grid.size != params.grid_size:
            params = params.replace(grid_size=grid.size)
        self.grid = grid
        self.params = params
        self.terrain = ObstacleField(grid, params)
        self.weather = weather if weather is not None else HazardField(grid, params, seed=seed)
        self.planner = RoutePlanner(grid, self.terrain, self.weather)
        self.scheduler = Scheduler(clock)
        self.driver: Optional[MissionDriver] = None
        self._hazard_task: Optional[PeriodicTask] = None
        self._mission_task: Optional[PeriodicTask] = None

    @classmethod
    def create(
        cls,
        south: float,
        north: float,
        west: float,
        east: float,
        size: Optional[int] = None,
        params: Optional[SimParams] = None,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "SimulationContext":
        params = params or DEFAULT_PARAMS
        grid = GeoGrid.from_bounds(south, north, west, east, size or params.grid_size)
        return cls(grid, params, seed=seed, clock=clock)

    # -----------------------------
    # Planning surface
    # -----------------------------

    def set_obstacles(self, polygons):
        return self.terrain.register_obstacles(polygons)

    def plan(self, start, goal, risk_tolerance: float = 50.0) -> Route:
        return self.planner.find_path(start, goal, risk_tolerance)

    def analyze(self, route: Route, battery_range_km: float = 15.0,
                risk_tolerance: float = 50.0) -> Optional[RouteReport]:
        return analyze_route(
            route,
            self.planner.sample_risk,
            BatteryParams(range_km=battery_range_km),
            risk_tolerance=risk_tolerance,
            speed_kmh=self.params.cruise_speed_kmh,
        )

    def sample_risk(self, point) -> float:
        return self.planner.sample_risk(point)

    def sample_weather(self, point) -> HazardCell:
        return self.planner.sample_weather(point)

    # -----------------------------
    # Ticks
    # -----------------------------

    def hazard_tick(self) -> float:
        return self.weather.advance(self.params.weather_dt)

    def mission_tick(self) -> MissionStatus:
        if self.driver is None:
            return MissionStatus.INACTIVE
        return self.driver.tick()

    # -----------------------------
    # Missions
    # -----------------------------

    def start_mission(self, route, goal=None, listener: Optional[Callable[[MissionEvent], None]] = None,
                      risk_fn: Optional[Callable[[LatLng], float]] = None) -> MissionState:
        if self._mission_task is not None:
            self._mission_task.cancel()
            self._mission_task = None
        self.driver = MissionDriver(self.planner, self.params, risk_fn=risk_fn)
        self.driver.add_listener(self._on_mission_event)
        if listener is not None:
            self.driver.add_listener(listener)
        state = self.driver.start(route, goal)
        if self._hazard_task is not None:
            self._schedule_mission()
        return state

    def _on_mission_event(self, event: MissionEvent):
        if event.kind is EventKind.STATE_CHANGED and event.status.finished:
            if self._mission_task is not None:
                self._mission_task.cancel()
                self._mission_task = None
                logger.info(f"Mission task stopped ({event.status.value})")

    def _schedule_mission(self):
        self._mission_task = self.scheduler.every(
            self.params.mission_interval, self.mission_tick, name="mission"
        )

    # -----------------------------
    # Clock
    # -----------------------------

    def start_clock(self):
        """Register the periodic tasks; drive them with scheduler.run_pending/run_for."""
        if self._hazard_task is None:
            self._hazard_task = self.scheduler.every(
                self.params.weather_interval, self.hazard_tick, name="weather"
            )
        if self.driver is not None and not self.driver.status.finished and self._mission_task is None:
            self._schedule_mission()

    def stop(self):
        self.scheduler.cancel_all()
        self._hazard_task = None
        self._mission_task = None
