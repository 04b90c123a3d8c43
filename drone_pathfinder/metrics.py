# metrics.py
from dataclasses import dataclass
import logging
from typing import Callable, Optional

import numpy as np

from drone_pathfinder.config import BASE_RISK, CRUISE_SPEED_KMH
from drone_pathfinder.energy import BatteryParams, estimate_usage_pct
from drone_pathfinder.geometry import path_length_km
from drone_pathfinder.models import LatLng, Route

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteReport:
    distance_km: float
    battery_usage_pct: float
    within_range: bool
    mean_risk: float
    max_risk: float
    display_risk: float     # mean risk rescaled so base terrain reads as 0
    eta_min: float
    time_saved_min: float   # vs. a route flown at display_risk exposure
    exceeds_tolerance: bool

    def to_dict(self) -> dict:
        return dict(self.__dict__)


def display_risk(mean_risk: float, base_risk: float = BASE_RISK) -> float:
    return float(np.clip((mean_risk - base_risk) * (100.0 / (100.0 - base_risk)), 0.0, 100.0))


def risk_label(risk: float, warning: float = 30.0, danger: float = 60.0) -> str:
    if risk > danger:
        return "HIGH"
    if risk > warning:
        return "MODERATE"
    return "LOW"


def analyze_route(
    route: Route,
    risk_fn: Callable[[LatLng], float],
    battery: Optional[BatteryParams] = None,
    risk_tolerance: float = 50.0,
    speed_kmh: float = CRUISE_SPEED_KMH,
) -> Optional[RouteReport]:
    """Distance, battery and exposure summary of a planned route; None for an empty one."""
    if not route:
        return None
    battery = battery or BatteryParams()

    dist = path_length_km(route)
    usage = estimate_usage_pct(dist, battery)
    risks = np.array([risk_fn(p) for p in route], dtype=np.float64)
    mean_r = float(risks.mean())
    shown = display_risk(mean_r)

    eta = dist / speed_kmh * 60.0 if speed_kmh > 0 else float("inf")
    saved = eta * (shown / 100.0) * 0.5

    report = RouteReport(
        distance_km=dist,
        battery_usage_pct=usage,
        within_range=dist <= battery.range_km,
        mean_risk=mean_r,
        max_risk=float(risks.max()),
        display_risk=shown,
        eta_min=eta,
        time_saved_min=saved,
        exceeds_tolerance=shown > risk_tolerance,
    )
    if not report.within_range:
        logger.warning(f"Route {dist:.2f} km exceeds battery range {battery.range_km:.2f} km")
    return report
