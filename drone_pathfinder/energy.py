# region Imports
from dataclasses import dataclass

from drone_pathfinder.config import BATTERY_DRAIN, LOW_BATTERY
# endregion


# region Battery Parameters
@dataclass
class BatteryParams:
    range_km: float = 15.0          # distance on a full charge
    drain_per_tick: float = BATTERY_DRAIN
    low_threshold: float = LOW_BATTERY
    capacity_pct: float = 100.0
# endregion


# region Usage Estimates
def estimate_usage_pct(distance_km: float, params: BatteryParams) -> float:
    """Share of a full charge a route of distance_km would use (may exceed 100)."""
    if params.range_km <= 0:
        return float("inf")
    return distance_km / params.range_km * params.capacity_pct


def ticks_until_empty(battery: float, params: BatteryParams) -> int:
    if params.drain_per_tick <= 0:
        return -1
    return max(0, int(-(-battery // params.drain_per_tick)))


def drain(battery: float, params: BatteryParams) -> float:
    return battery - params.drain_per_tick
# endregion
