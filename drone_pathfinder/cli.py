"""
Command line entry point.

    drone-pathfinder plan --bbox 8,37,68,97 --start 12.9,77.6 --goal 28.6,77.2
    drone-pathfinder simulate --bbox ... --start ... --goal ... --seed 7

Obstacles come from a YAML or JSON file holding a list of polygons, each a
list of [lat, lng] pairs.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import yaml

from drone_pathfinder.config import DEFAULT_PARAMS, SimParams
from drone_pathfinder.metrics import risk_label
from drone_pathfinder.mission import MissionEvent
from drone_pathfinder.models import LatLng, MissionStatus
from drone_pathfinder.route_export import route_payload, write_route_json
from drone_pathfinder.scheduler import ManualClock
from drone_pathfinder.session import SimulationContext

logger = logging.getLogger(__name__)


def _floats(text: str, n: int, what: str) -> List[float]:
    try:
        vals = [float(v) for v in text.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(f"{what}: expected {n} comma-separated numbers, got {text!r}")
    if len(vals) != n:
        raise argparse.ArgumentTypeError(f"{what}: expected {n} comma-separated numbers, got {text!r}")
    return vals


def _bbox(text: str) -> List[float]:
    return _floats(text, 4, "bbox (south,north,west,east)")


def _point(text: str) -> LatLng:
    lat, lng = _floats(text, 2, "point (lat,lng)")
    return LatLng(lat, lng)


def load_polygons(path: Optional[str]):
    if not path:
        return []
    with open(path, "r") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get("polygons", [])
    return [[LatLng.of(v) for v in poly] for poly in data]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="drone-pathfinder", description="Risk-aware route planning")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", help="YAML file overriding simulation parameters")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--bbox", type=_bbox, required=True, help="south,north,west,east")
    common.add_argument("--grid", type=int, default=None, help="Grid dimension N")
    common.add_argument("--start", type=_point, required=True, help="lat,lng")
    common.add_argument("--goal", type=_point, required=True, help="lat,lng")
    common.add_argument("--tolerance", type=float, default=50.0, help="Risk tolerance 0-100")
    common.add_argument("--obstacles", help="YAML/JSON list of polygons")
    common.add_argument("--seed", type=int, default=None, help="Weather seed")
    common.add_argument("--battery-range", type=float, default=15.0, help="Range on full charge (km)")

    sub = parser.add_subparsers(dest="command", required=True)
    p_plan = sub.add_parser("plan", parents=[common], help="Plan a route and print it as JSON")
    p_plan.add_argument("--out", help="Write the route JSON here instead of stdout")

    p_sim = sub.add_parser("simulate", parents=[common], help="Plan and fly a simulated mission")
    p_sim.add_argument("--max-seconds", type=float, default=3600.0, help="Simulated time limit")
    p_sim.add_argument("--realtime", action="store_true", help="Run on the wall clock")
    return parser


def _context(args, params: SimParams, clock=None) -> SimulationContext:
    south, north, west, east = args.bbox
    ctx = SimulationContext.create(south, north, west, east, size=args.grid,
                                   params=params, seed=args.seed, clock=clock)
    ctx.set_obstacles(load_polygons(args.obstacles))
    return ctx


def cmd_plan(args, params: SimParams) -> int:
    ctx = _context(args, params)
    route = ctx.plan(args.start, args.goal, args.tolerance)
    report = ctx.analyze(route, args.battery_range, args.tolerance)
    if not route:
        logger.error("No path found; try a higher risk tolerance or different endpoints")
    if args.out:
        write_route_json(route, args.out, report)
    else:
        json.dump(route_payload(route, report), sys.stdout, indent=2)
        sys.stdout.write("\n")
    return 0 if route else 1


def _print_event(event: MissionEvent):
    where = f"{event.position.lat:.4f},{event.position.lng:.4f}" if event.position else "-"
    extra = f" risk={event.risk:.0f} ({risk_label(event.risk)})" if event.risk is not None else ""
    print(f"[{event.status.value.upper():8}] {event.kind.value:13} @ {where} "
          f"battery={event.battery:.1f}%{extra} :: {event.message}")


def cmd_simulate(args, params: SimParams) -> int:
    clock = None if args.realtime else ManualClock()
    ctx = _context(args, params, clock=clock)
    route = ctx.plan(args.start, args.goal, args.tolerance)
    if len(route) < 2:
        logger.error("No route to fly")
        return 1

    report = ctx.analyze(route, args.battery_range, args.tolerance)
    if report is not None and not report.within_range:
        logger.error(f"Insufficient range: {report.distance_km:.2f} km > {args.battery_range:.2f} km")
        return 1

    ctx.start_mission(route, args.goal, listener=_print_event)
    ctx.start_clock()
    sleep = clock.sleep if clock is not None else None
    elapsed = 0.0
    while not ctx.driver.status.finished and elapsed < args.max_seconds:
        if sleep is not None:
            ctx.scheduler.run_for(1.0, sleep=sleep)
        else:
            ctx.scheduler.run_for(1.0)
        elapsed += 1.0
    ctx.stop()

    if not ctx.driver.status.finished:
        ctx.driver.abort("Simulated time limit reached")
    print(f"Mission finished: {ctx.driver.status.value} after {elapsed:.0f}s, "
          f"{ctx.driver.state.reroutes} reroutes")
    return 0 if ctx.driver.status is MissionStatus.COMPLETE else 2


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    params = SimParams.from_yaml(args.config) if args.config else DEFAULT_PARAMS
    if args.command == "plan":
        return cmd_plan(args, params)
    return cmd_simulate(args, params)


if __name__ == "__main__":
    sys.exit(main())
