# region Imports
import math
from typing import Optional, Tuple

import numpy as np

from drone_pathfinder.config import BLOCK_RISK
# endregion


# region Risk Weighting
def clamp_tolerance(risk_tolerance: float) -> float:
    return max(0.0, min(100.0, float(risk_tolerance)))


def risk_weight(risk_tolerance: float) -> float:
    """0 tolerance -> weight 50 (avoid risk), 100 -> weight 0 (ignore risk)."""
    return max(0.0, (100.0 - clamp_tolerance(risk_tolerance)) / 2.0)


def combined_risk(terrain: np.ndarray, weather: Optional[np.ndarray] = None) -> np.ndarray:
    """Terrain and weather hazard combine by maximum, never by sum."""
    if weather is None:
        return np.minimum(terrain, 100.0)
    return np.minimum(np.maximum(terrain, weather), 100.0)
# endregion


# region Edge Cost Factory
def risk_edge_cost_factory(
    risk: np.ndarray,
    risk_tolerance: float,
    block_risk: float = BLOCK_RISK,
):
    weight = risk_weight(risk_tolerance)

    # region Edge-cost Function
    def edge_cost(u: Tuple[int, int], v: Tuple[int, int]) -> Optional[float]:
        x0, y0 = u
        x1, y1 = v
        r = float(risk[y1, x1])
        if r >= block_risk:
            return None
        step = math.hypot(x1 - x0, y1 - y0)
        return step + (r * weight) / 10.0
    # endregion

    return edge_cost
# endregion


# region Heuristic
def euclid(a: Tuple[int, int], b: Tuple[int, int]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])
# endregion
