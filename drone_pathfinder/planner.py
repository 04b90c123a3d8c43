# planner.py
# ----------------
# Risk-weighted A* over the combined hazard surface (terrain max weather).
#
# Every search runs on a RiskSnapshot taken when the call starts, so a
# weather tick landing mid-plan cannot change the field under the search.

from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import List, Optional

import numpy as np

from drone_pathfinder.astar_core import astar, neighbors_8
from drone_pathfinder.costs import clamp_tolerance, combined_risk, euclid, risk_edge_cost_factory
from drone_pathfinder.grid import cells_to_route, to_cell
from drone_pathfinder.models import Cell, GeoGrid, HazardCell, LatLng, Route
from drone_pathfinder.terrain import ObstacleField
from drone_pathfinder.weather import HazardField

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskSnapshot:
    """Immutable copies of both hazard layers and their combination."""
    terrain: np.ndarray
    weather: Optional[np.ndarray]
    combined: np.ndarray

    def risk_at_cell(self, cell: Cell) -> float:
        x, y = cell
        return float(self.combined[y, x])


@dataclass
class PlanResult:
    cells: List[Cell] = field(default_factory=list)
    cost: float = float("inf")
    expansions: int = 0
    risk_tolerance: float = 50.0

    @property
    def found(self) -> bool:
        return bool(self.cells)


def _frozen_copy(arr: np.ndarray) -> np.ndarray:
    out = np.array(arr, dtype=np.float64, copy=True)
    out.setflags(write=False)
    return out


class RoutePlanner:
    def __init__(
        self,
        grid: GeoGrid,
        terrain: ObstacleField,
        weather: Optional[HazardField] = None,
        max_expansions: Optional[int] = None,
    ):
        self.grid = grid
        self.terrain = terrain
        self.weather = weather
        self.max_expansions = max_expansions

    # region Snapshots and Sampling
    def snapshot(self) -> RiskSnapshot:
        terrain = _frozen_copy(self.terrain.risk)
        weather = _frozen_copy(self.weather.risk_grid()) if self.weather is not None else None
        combined = _frozen_copy(combined_risk(terrain, weather))
        return RiskSnapshot(terrain=terrain, weather=weather, combined=combined)

    def sample_risk(self, point) -> float:
        """Combined (max of terrain, weather) risk at a point, in [0, 100]."""
        cell = to_cell(self.grid, point)
        risk = self.terrain.risk_at_cell(cell)
        if self.weather is not None:
            risk = max(risk, self.weather.sample_cell(cell).risk)
        return min(100.0, risk)

    def sample_weather(self, point) -> HazardCell:
        if self.weather is None:
            return HazardCell.CLEAR
        return self.weather.sample_at(point)
    # endregion

    # region Search
    def find_path_cells(
        self,
        start: Cell,
        goal: Cell,
        risk_tolerance: float = 50.0,
        snapshot: Optional[RiskSnapshot] = None,
    ) -> PlanResult:
        snap = snapshot or self.snapshot()
        tol = clamp_tolerance(risk_tolerance)
        size = self.grid.size
        path, cost, expansions = astar(
            start, goal,
            neighbors_fn=lambda u: neighbors_8(u, size),
            edge_cost_fn=risk_edge_cost_factory(snap.combined, tol, self.terrain.params.block_risk),
            heuristic_fn=euclid,
            max_expansions=self.max_expansions,
        )
        if path is None:
            logger.info(f"No path {start} -> {goal} at tolerance {tol:.0f} ({expansions} expansions)")
            return PlanResult(expansions=expansions, risk_tolerance=tol)
        logger.debug(f"Path {start} -> {goal}: {len(path)} cells, cost={cost:.2f}, expansions={expansions}")
        return PlanResult(cells=path, cost=float(cost), expansions=expansions, risk_tolerance=tol)

    def find_path(self, start, goal, risk_tolerance: float = 50.0) -> Route:
        """
        Cell-centre route from start to goal inclusive, or [] when the goal
        cannot be reached. Out-of-region endpoints are clamped.
        """
        s = to_cell(self.grid, LatLng.of(start))
        t = to_cell(self.grid, LatLng.of(goal))
        result = self.find_path_cells(s, t, risk_tolerance)
        return cells_to_route(self.grid, result.cells)
    # endregion
