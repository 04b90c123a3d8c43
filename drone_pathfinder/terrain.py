# terrain.py
# ----------------
# Static terrain hazard: no-fly polygons rasterised onto the grid plus a
# decaying risk buffer spread around them.
#
# Exposes:
#   - rasterize_polygons(grid, polygons, base_risk, block_risk)
#   - diffuse(risk, blocked, threshold, decay)   (one buffer pass)
#   - ObstacleField                               (owns the terrain grid)
#
# Dependencies: numpy

from __future__ import annotations
import logging
from typing import Iterable, List, Sequence

import numpy as np

from drone_pathfinder.config import DEFAULT_PARAMS, SimParams
from drone_pathfinder.geometry import point_in_polygon
from drone_pathfinder.grid import to_cell, to_latlng
from drone_pathfinder.models import Cell, GeoGrid, LatLng

logger = logging.getLogger(__name__)

Polygon = Sequence[LatLng]

_OFFSETS_8 = [(dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)]


# -----------------------------
# Utilities
# -----------------------------

def _normalize_polygons(polygons) -> List[List[LatLng]]:
    out = []
    for poly in polygons or []:
        verts = [LatLng.of(p) for p in poly]
        if len(verts) < 3:
            logger.warning(f"Ignoring obstacle with {len(verts)} vertices (need >= 3)")
            continue
        out.append(verts)
    return out


def _index_span(values, origin: float, step: float, n: int):
    lo = int(np.floor((min(values) - origin) / step))
    hi = int(np.floor((max(values) - origin) / step))
    return max(0, lo), min(n - 1, hi)


def neighbor_max(risk: np.ndarray) -> np.ndarray:
    """Per-cell maximum over the 8-connected neighbours (edges padded with -inf)."""
    H, W = risk.shape
    padded = np.pad(risk.astype(np.float64), 1, mode="constant", constant_values=-np.inf)
    out = np.full((H, W), -np.inf)
    for dy, dx in _OFFSETS_8:
        np.maximum(out, padded[1 + dy:1 + dy + H, 1 + dx:1 + dx + W], out=out)
    return out


def diffuse(
    risk: np.ndarray,
    blocked: np.ndarray,
    threshold: float = DEFAULT_PARAMS.diffusion_threshold,
    decay: float = DEFAULT_PARAMS.diffusion_decay,
) -> np.ndarray:
    """
    One buffer pass. For every non-blocked cell whose strongest neighbour
    exceeds `threshold`, raise it to floor(neighbour * decay) if that is
    higher. Reads only the input grid; never lowers a cell.
    """
    nmax = neighbor_max(risk)
    candidate = np.floor(np.where(nmax > threshold, nmax * decay, -np.inf))
    raise_mask = (~blocked) & (candidate > risk)
    return np.where(raise_mask, candidate, risk)


def rasterize_polygons(
    grid: GeoGrid,
    polygons: Iterable[Polygon],
    base_risk: float = DEFAULT_PARAMS.base_risk,
    block_risk: float = DEFAULT_PARAMS.block_risk,
) -> np.ndarray:
    """Base-risk grid with every cell whose centre lies inside a polygon set to block_risk."""
    n = grid.size
    risk = np.full((n, n), float(base_risk))
    for poly in polygons:
        # only test cells inside the polygon's bounding box
        x0, x1 = _index_span([p.lng for p in poly], grid.min_lng, grid.lng_step, n)
        y0, y1 = _index_span([p.lat for p in poly], grid.min_lat, grid.lat_step, n)
        for y in range(y0, y1 + 1):
            for x in range(x0, x1 + 1):
                if risk[y, x] >= block_risk:
                    continue
                if point_in_polygon(to_latlng(grid, (x, y)), poly):
                    risk[y, x] = block_risk
    return risk


# -----------------------------
# Obstacle field
# -----------------------------

class ObstacleField:
    """
    Terrain risk grid (N, N), indexed [y, x], values in [0, 100].
    Cells at block_risk are walls and are never touched by diffusion.
    """

    def __init__(self, grid: GeoGrid, params: SimParams = DEFAULT_PARAMS):
        self.grid = grid
        self.params = params
        self.polygons: List[List[LatLng]] = []
        self._risk = self._freeze(np.full(grid.shape, float(params.base_risk)))

    @staticmethod
    def _freeze(arr: np.ndarray) -> np.ndarray:
        arr.setflags(write=False)
        return arr

    def register_obstacles(self, polygons) -> np.ndarray:
        """Reset to base risk, rasterise polygons, then run the buffer passes."""
        P = self.params
        self.polygons = _normalize_polygons(polygons)
        risk = rasterize_polygons(self.grid, self.polygons, P.base_risk, P.block_risk)
        blocked = risk >= P.block_risk
        for _ in range(P.diffusion_passes):
            risk = diffuse(risk, blocked, P.diffusion_threshold, P.diffusion_decay)
        self._risk = self._freeze(np.clip(risk, 0.0, 100.0))
        logger.info(
            f"Registered {len(self.polygons)} obstacles: "
            f"{int(blocked.sum())} blocked cells, {int((risk > P.base_risk).sum())} above base"
        )
        return self._risk

    @property
    def risk(self) -> np.ndarray:
        return self._risk

    @property
    def blocked(self) -> np.ndarray:
        return self._risk >= self.params.block_risk

    @property
    def obstacle_count(self) -> int:
        return len(self.polygons)

    def risk_at_cell(self, cell: Cell) -> float:
        x, y = cell
        return float(self._risk[y, x])

    def risk_at(self, point) -> float:
        return self.risk_at_cell(to_cell(self.grid, point))
