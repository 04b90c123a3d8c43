# weather.py
# ----------------
# Procedural weather hazard for the planning region.
#
# A handful of moving weather systems (storms, wind fronts) drift across the
# grid; every advance re-renders the whole field into per-cell wind, rain,
# visibility and a derived 0..100 risk score.
#
# Dependencies: numpy

from __future__ import annotations
import logging
from typing import Iterable, List, Optional

import numpy as np

from drone_pathfinder.config import (
    DEFAULT_PARAMS, MAX_RAIN, MAX_VISIBILITY, MAX_WIND,
    WEATHER_SYSTEMS_MAX, WEATHER_SYSTEMS_MIN, SimParams,
)
from drone_pathfinder.grid import to_cell
from drone_pathfinder.models import Cell, GeoGrid, HazardCell, WeatherKind, WeatherSystem

logger = logging.getLogger(__name__)

# Per unit of power: (wind km/h, rain mm/h, visibility loss %)
KIND_PROFILE = {
    WeatherKind.STORM: (60.0, 40.0, 80.0),
    WeatherKind.WIND: (80.0, 0.0, 20.0),
}


# -----------------------------
# Risk formula
# -----------------------------

def weather_risk(wind, rain, visibility):
    """
    Piecewise-linear risk from clamped channel values:
      1.5 per km/h of wind above 20
      2.0 per mm/h of rain above 10
      1.5 per % of visibility below 80
    summed and capped at 100. Works on scalars and arrays.
    """
    risk = (1.5 * np.maximum(0.0, np.asarray(wind) - 20.0)
            + 2.0 * np.maximum(0.0, np.asarray(rain) - 10.0)
            + 1.5 * np.maximum(0.0, 80.0 - np.asarray(visibility)))
    return np.minimum(100.0, risk)


def generate_systems(size: int, rng: np.random.Generator) -> List[WeatherSystem]:
    """3-5 random systems; radius 5-15 cells, intensity 0.5-1.0, slow drift."""
    count = int(rng.integers(WEATHER_SYSTEMS_MIN, WEATHER_SYSTEMS_MAX + 1))
    systems = []
    for _ in range(count):
        systems.append(WeatherSystem(
            x=float(rng.uniform(0, size)),
            y=float(rng.uniform(0, size)),
            radius=float(rng.uniform(5.0, 15.0)),
            kind=WeatherKind.STORM if rng.random() > 0.5 else WeatherKind.WIND,
            intensity=float(rng.uniform(0.5, 1.0)),
            drift_x=float(rng.uniform(-0.05, 0.05)),
            drift_y=float(rng.uniform(-0.05, 0.05)),
        ))
    return systems


def _wrap(v: float, size: int) -> float:
    v = v % size
    return 0.0 if v >= size else v


# -----------------------------
# Hazard field
# -----------------------------

class HazardField:
    """
    Owns the weather systems and the rendered field.

    Readers (sample_at, risk_grid) only see fully rendered fields: advance()
    builds new arrays and swaps them in at the end.
    """

    def __init__(
        self,
        grid: GeoGrid,
        params: SimParams = DEFAULT_PARAMS,
        seed: Optional[int] = None,
        systems: Optional[Iterable[WeatherSystem]] = None,
    ):
        self.grid = grid
        self.params = params
        self.rng = np.random.default_rng(seed)
        self.time = 0.0
        if systems is None:
            self.systems = generate_systems(grid.size, self.rng)
        else:
            self.systems = list(systems)
        self._render()
        logger.debug(f"Weather initialised with {len(self.systems)} systems")

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng = np.random.default_rng(seed)
        self.time = 0.0
        self.systems = generate_systems(self.grid.size, self.rng)
        self._render()
        logger.info(f"Weather regenerated: {len(self.systems)} systems")

    def advance(self, dt: float = 1.0) -> float:
        """Drift every system by drift*dt (toroidal wrap) and re-render."""
        n = self.grid.size
        for s in self.systems:
            s.x = _wrap(s.x + s.drift_x * dt, n)
            s.y = _wrap(s.y + s.drift_y * dt, n)
        self.time += dt
        self._render()
        return self.time

    def _render(self) -> None:
        n = self.grid.size
        ys, xs = np.mgrid[0:n, 0:n].astype(np.float64)
        wind = np.zeros((n, n))
        rain = np.zeros((n, n))
        vis_loss = np.zeros((n, n))

        for s in self.systems:
            dist = np.hypot(xs - s.x, ys - s.y)
            power = np.where(dist < s.radius, (1.0 - dist / s.radius) * s.intensity, 0.0)
            k_wind, k_rain, k_vis = KIND_PROFILE[s.kind]
            wind += power * k_wind
            rain += power * k_rain
            vis_loss += power * k_vis

        if self.params.wind_noise > 0:
            wind += self.rng.random((n, n)) * self.params.wind_noise

        wind = np.clip(wind, 0.0, MAX_WIND)
        rain = np.clip(rain, 0.0, MAX_RAIN)
        visibility = np.clip(MAX_VISIBILITY - vis_loss, 0.0, MAX_VISIBILITY)
        risk = weather_risk(wind, rain, visibility)

        for arr in (wind, rain, visibility, risk):
            arr.setflags(write=False)
        self._wind, self._rain, self._visibility, self._risk = wind, rain, visibility, risk

    # -----------------------------
    # Reads
    # -----------------------------

    def sample_cell(self, cell: Cell) -> HazardCell:
        x, y = cell
        return HazardCell(
            wind=float(self._wind[y, x]),
            rain=float(self._rain[y, x]),
            visibility=float(self._visibility[y, x]),
            risk=float(self._risk[y, x]),
        )

    def sample_at(self, point) -> HazardCell:
        return self.sample_cell(to_cell(self.grid, point))

    def risk_at(self, point) -> float:
        x, y = to_cell(self.grid, point)
        return float(self._risk[y, x])

    def risk_grid(self) -> np.ndarray:
        """Read-only (N, N) risk array of the current render, indexed [y, x]."""
        return self._risk
