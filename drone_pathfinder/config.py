# config.py
from dataclasses import dataclass, fields, replace as dc_replace
import logging
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

EARTH_R = 6_371_000.0  # Earth mean radius (m)

# Grid
GRID_SIZE = 60
BASE_RISK = 10.0
BLOCK_RISK = 100.0  # the only value the planner treats as a wall

# Obstacle buffer: neighbour max above threshold bleeds into cell as max * decay
DIFFUSION_THRESHOLD = 15.0
DIFFUSION_DECAY = 0.6
DIFFUSION_PASSES = 2

# Weather channels
MAX_WIND = 100.0      # km/h
MAX_RAIN = 50.0       # mm/h
MAX_VISIBILITY = 100.0  # %
WIND_NOISE = 5.0
WEATHER_SYSTEMS_MIN = 3
WEATHER_SYSTEMS_MAX = 5
WEATHER_DT = 0.1

# Mission
DANGER_RISK = 60.0
WARNING_RISK = 30.0
LOW_BATTERY = 20.0
REPLAN_TOLERANCE = 10.0
PROGRESS_STEP = 0.2   # fraction of a segment per tick
BATTERY_DRAIN = 0.5   # % per tick
CRUISE_SPEED_KMH = 60.0

# Scheduler periods (seconds)
WEATHER_INTERVAL = 2.0
MISSION_INTERVAL = 1.0


@dataclass(frozen=True)
class SimParams:
    grid_size: int = GRID_SIZE
    base_risk: float = BASE_RISK
    block_risk: float = BLOCK_RISK
    diffusion_threshold: float = DIFFUSION_THRESHOLD
    diffusion_decay: float = DIFFUSION_DECAY
    diffusion_passes: int = DIFFUSION_PASSES
    wind_noise: float = WIND_NOISE
    weather_dt: float = WEATHER_DT
    danger_risk: float = DANGER_RISK
    warning_risk: float = WARNING_RISK
    low_battery: float = LOW_BATTERY
    replan_tolerance: float = REPLAN_TOLERANCE
    progress_step: float = PROGRESS_STEP
    battery_drain: float = BATTERY_DRAIN
    cruise_speed_kmh: float = CRUISE_SPEED_KMH
    weather_interval: float = WEATHER_INTERVAL
    mission_interval: float = MISSION_INTERVAL

    def __post_init__(self):
        if self.grid_size < 1:
            raise ValueError(f"grid_size must be >= 1, got {self.grid_size}")
        if not 0.0 < self.progress_step <= 1.0:
            raise ValueError(f"progress_step must be in (0, 1], got {self.progress_step}")
        if self.weather_interval <= 0 or self.mission_interval <= 0:
            raise ValueError("scheduler intervals must be positive")

    def replace(self, **overrides) -> "SimParams":
        return dc_replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SimParams":
        data = dict(data or {})
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        kwargs = {}
        for key, value in data.items():
            kwargs[key] = int(value) if known[key].type in (int, "int") else float(value)
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: str) -> "SimParams":
        """Load overrides from a YAML mapping; missing keys keep their defaults."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping at the top level")
        params = cls.from_dict(data)
        logger.info(f"Loaded simulation parameters from {path}")
        return params


DEFAULT_PARAMS = SimParams()
