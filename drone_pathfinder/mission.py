"""
Mission driver: flies a simulated agent along a planned route and keeps the
route safe while it does.

State machine:
    INACTIVE -> ACTIVE <-> PAUSED -> ABORTED | COMPLETE

Each tick the agent moves a fixed fraction of the current segment, drains a
fixed amount of battery and samples the combined risk at its new position.
Above the danger threshold the driver pauses, replans from where the agent
is to the original goal with a tight tolerance, and either resumes on the new
route or aborts. Warning-band risk and low battery only raise events.

Observers subscribe with add_listener(); they receive MissionEvent objects.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from drone_pathfinder.config import DEFAULT_PARAMS, SimParams
from drone_pathfinder.energy import BatteryParams, drain, ticks_until_empty
from drone_pathfinder.geometry import lerp
from drone_pathfinder.metrics import risk_label
from drone_pathfinder.models import LatLng, MissionState, MissionStatus, Route

logger = logging.getLogger(__name__)

# tolerance for float accumulation of progress steps (5 x 0.2 must reach 1)
_PROGRESS_EPS = 1e-9


class EventKind(Enum):
    STATE_CHANGED = "state_changed"
    CHECKPOINT = "checkpoint"
    WARNING = "warning"
    DANGER = "danger"
    LOW_BATTERY = "low_battery"
    REROUTED = "rerouted"


@dataclass(frozen=True)
class MissionEvent:
    kind: EventKind
    status: MissionStatus
    message: str
    position: Optional[LatLng] = None
    battery: float = 100.0
    risk: Optional[float] = None


class MissionDriver:
    """
    Owns one MissionState at a time. `planner` needs find_path(start, goal,
    risk_tolerance) and, unless risk_fn is given, sample_risk(point).
    """

    def __init__(
        self,
        planner,
        params: SimParams = DEFAULT_PARAMS,
        risk_fn: Optional[Callable[[LatLng], float]] = None,
        battery: Optional[BatteryParams] = None,
    ):
        self.planner = planner
        self.params = params
        self.risk_fn = risk_fn or planner.sample_risk
        self.battery = battery or BatteryParams(
            drain_per_tick=params.battery_drain, low_threshold=params.low_battery
        )
        self.state: Optional[MissionState] = None
        self.listeners: List[Callable[[MissionEvent], None]] = []

    # -----------------------------
    # Observers
    # -----------------------------

    def add_listener(self, callback: Callable[[MissionEvent], None]):
        """Register callback for mission events"""
        self.listeners.append(callback)

    def remove_listener(self, callback: Callable[[MissionEvent], None]):
        if callback in self.listeners:
            self.listeners.remove(callback)

    def _emit(self, kind: EventKind, message: str, risk: Optional[float] = None):
        st = self.state
        event = MissionEvent(
            kind=kind,
            status=self.status,
            message=message,
            position=st.position if st else None,
            battery=st.battery if st else 100.0,
            risk=risk,
        )
        for callback in list(self.listeners):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Mission listener failed on {kind.value} event")

    def _transition(self, new: MissionStatus, message: str):
        old = self.state.status
        self.state.status = new
        if new is MissionStatus.ABORTED:
            logger.error(f"Mission {old.value} -> {new.value}: {message}")
        else:
            logger.info(f"Mission {old.value} -> {new.value}: {message}")
        self._emit(EventKind.STATE_CHANGED, message)

    # -----------------------------
    # Accessors
    # -----------------------------

    @property
    def status(self) -> MissionStatus:
        return self.state.status if self.state else MissionStatus.INACTIVE

    @property
    def position(self) -> Optional[LatLng]:
        return self.state.position if self.state else None

    @property
    def route(self) -> Route:
        return list(self.state.route) if self.state else []

    # -----------------------------
    # Operator controls
    # -----------------------------

    def start(self, route, goal=None) -> MissionState:
        route = [LatLng.of(p) for p in (route or [])]
        if len(route) < 2:
            raise ValueError(f"A mission needs a route of at least 2 points, got {len(route)}")
        self.state = MissionState(
            route=route,
            goal=LatLng.of(goal) if goal is not None else route[-1],
            battery=self.battery.capacity_pct,
            position=route[0],
            trail=[route[0]],
        )
        self._transition(MissionStatus.ACTIVE, f"Mission started: {len(route)} waypoints")
        return self.state

    def pause(self) -> bool:
        if self.status is not MissionStatus.ACTIVE:
            logger.debug(f"Ignoring pause while {self.status.value}")
            return False
        self._transition(MissionStatus.PAUSED, "Paused by operator")
        return True

    def resume(self) -> bool:
        if self.status is not MissionStatus.PAUSED:
            logger.debug(f"Ignoring resume while {self.status.value}")
            return False
        self._transition(MissionStatus.ACTIVE, "Resumed by operator")
        return True

    def abort(self, reason: str = "Aborted by operator") -> bool:
        if self.status not in (MissionStatus.ACTIVE, MissionStatus.PAUSED):
            logger.debug(f"Ignoring abort while {self.status.value}")
            return False
        self._transition(MissionStatus.ABORTED, reason)
        return True

    # -----------------------------
    # Simulation step
    # -----------------------------

    def tick(self) -> MissionStatus:
        st = self.state
        if st is None or st.status is not MissionStatus.ACTIVE:
            return self.status

        if st.battery <= 0:
            self._transition(MissionStatus.ABORTED, "Battery depleted; forced landing")
            return st.status

        st.progress += self.params.progress_step
        if st.progress >= 1.0 - _PROGRESS_EPS:
            st.progress = 0.0
            st.segment += 1
            if st.segment >= len(st.route) - 1:
                st.position = st.route[-1]
                st.trail.append(st.position)
                self._transition(MissionStatus.COMPLETE, "Target reached")
                return st.status
            self._emit(
                EventKind.CHECKPOINT,
                f"Checkpoint {st.segment}/{len(st.route) - 1} reached, battery {st.battery:.0f}%",
            )

        st.position = lerp(st.route[st.segment], st.route[st.segment + 1], st.progress)
        st.trail.append(st.position)
        st.battery = max(0.0, drain(st.battery, self.battery))

        risk = float(self.risk_fn(st.position))
        logger.debug(
            f"tick seg={st.segment} progress={st.progress:.2f} "
            f"battery={st.battery:.1f} risk={risk:.1f} ({risk_label(risk)})"
        )

        if risk > self.params.danger_risk:
            self._emit(EventKind.DANGER, f"Dangerous conditions ahead (risk {risk:.0f})", risk)
            self._reroute(risk)
            return st.status
        if risk > self.params.warning_risk:
            self._emit(EventKind.WARNING, f"High risk zone (risk {risk:.0f})", risk)

        if st.battery < self.battery.low_threshold:
            left = ticks_until_empty(st.battery, self.battery)
            self._emit(EventKind.LOW_BATTERY, f"Battery low ({st.battery:.1f}%, ~{left} ticks left)")

        return st.status

    def _reroute(self, risk: float):
        st = self.state
        self._transition(MissionStatus.PAUSED, f"Hazard breach (risk {risk:.0f}); rerouting")
        tol = self.params.replan_tolerance
        new_route = self.planner.find_path(st.position, st.goal, tol)

        if not new_route:
            self._transition(MissionStatus.ABORTED, "No safe route to target")
            return

        # keep the agent where it is; the planner starts from its cell centre
        st.route = [st.position] + (list(new_route[1:]) or list(new_route))
        st.segment = 0
        st.progress = 0.0
        st.reroutes += 1
        logger.warning(f"Rerouted at tolerance {tol:.0f}: {len(st.route)} waypoints")
        self._emit(EventKind.REROUTED, f"New safe route with {len(st.route)} waypoints", risk)
        self._transition(MissionStatus.ACTIVE, "Resuming on new route")
