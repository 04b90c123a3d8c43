# region Imports
from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from drone_pathfinder.models import LatLng
# endregion

logger = logging.getLogger(__name__)


# region Route -> Positions
def route_to_positions(route: Sequence[LatLng]) -> List[Dict[str, float]]:
    return [{"lat": float(p.lat), "lon": float(p.lng)} for p in route]


def route_payload(route: Sequence[LatLng], report: Optional[Any] = None) -> Dict[str, Any]:
    """{"positions": [...], "found": bool} plus the route report fields when given."""
    payload: Dict[str, Any] = {"positions": route_to_positions(route), "found": bool(route)}
    if report is not None:
        payload["report"] = report.to_dict()
    return payload
# endregion


# region Writers
def write_route_json(route: Sequence[LatLng], out_path: str, report: Optional[Any] = None) -> None:
    with open(out_path, "w") as f:
        json.dump(route_payload(route, report), f, indent=2)
    logger.info(f"Wrote {len(route)} points to {out_path}")
# endregion
