# region Imports
import logging
import math
from typing import Tuple

import numpy as np

from drone_pathfinder.models import Cell, GeoGrid, LatLng
# endregion

logger = logging.getLogger(__name__)


# region Bounds
def in_bounds(grid: GeoGrid, point: LatLng) -> bool:
    return (grid.min_lat <= point.lat <= grid.max_lat
            and grid.min_lng <= point.lng <= grid.max_lng)


def valid_cell(grid: GeoGrid, x: int, y: int) -> bool:
    return 0 <= x < grid.size and 0 <= y < grid.size
# endregion


# region Point <-> Cell
def to_cell(grid: GeoGrid, point) -> Cell:
    """
    Map a geographic point to its (x, y) cell. Points outside the region are
    clamped to the nearest edge cell rather than rejected.
    """
    point = LatLng.of(point)
    x = math.floor((point.lng - grid.min_lng) / (grid.max_lng - grid.min_lng) * grid.size)
    y = math.floor((point.lat - grid.min_lat) / (grid.max_lat - grid.min_lat) * grid.size)
    cx = max(0, min(grid.size - 1, x))
    cy = max(0, min(grid.size - 1, y))
    if (cx, cy) != (x, y) and not in_bounds(grid, point):
        logger.warning(f"Point ({point.lat:.5f}, {point.lng:.5f}) outside region; clamped to cell {(cx, cy)}")
    return (cx, cy)


def to_latlng(grid: GeoGrid, cell: Cell) -> LatLng:
    x, y = cell
    return LatLng(
        grid.min_lat + (y + 0.5) * grid.lat_step,
        grid.min_lng + (x + 0.5) * grid.lng_step,
    )


def cells_to_route(grid: GeoGrid, cells):
    return [to_latlng(grid, c) for c in cells]
# endregion


# region Cell-centre Arrays
def cell_centers(grid: GeoGrid) -> Tuple[np.ndarray, np.ndarray]:
    """(lat, lng) arrays of shape (N, N), indexed [y, x]."""
    lats = grid.min_lat + (np.arange(grid.size, dtype=np.float64) + 0.5) * grid.lat_step
    lngs = grid.min_lng + (np.arange(grid.size, dtype=np.float64) + 0.5) * grid.lng_step
    return np.repeat(lats[:, None], grid.size, axis=1), np.tile(lngs, (grid.size, 1))
# endregion
