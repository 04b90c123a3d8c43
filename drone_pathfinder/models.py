# models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Tuple

Cell = Tuple[int, int]  # (x, y); numpy grids are indexed [y, x]


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float

    @classmethod
    def of(cls, point) -> "LatLng":
        """Accept a LatLng, a (lat, lng) pair or a {"lat", "lng"|"lon"} mapping."""
        if isinstance(point, LatLng):
            return point
        if isinstance(point, dict):
            return cls(float(point["lat"]), float(point.get("lng", point.get("lon"))))
        lat, lng = point
        return cls(float(lat), float(lng))


Route = List[LatLng]


@dataclass(frozen=True)
class GeoGrid:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float
    size: int

    def __post_init__(self):
        if self.size < 1:
            raise ValueError(f"Grid size must be >= 1, got {self.size}")
        if not (self.max_lat > self.min_lat and self.max_lng > self.min_lng):
            raise ValueError(
                f"Degenerate region: lat {self.min_lat}..{self.max_lat}, "
                f"lng {self.min_lng}..{self.max_lng}"
            )

    @classmethod
    def from_bounds(cls, south: float, north: float, west: float, east: float, size: int) -> "GeoGrid":
        return cls(float(south), float(north), float(west), float(east), int(size))

    @property
    def lat_step(self) -> float:
        return (self.max_lat - self.min_lat) / self.size

    @property
    def lng_step(self) -> float:
        return (self.max_lng - self.min_lng) / self.size

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.size, self.size)


class WeatherKind(Enum):
    STORM = "storm"  # wind + rain + heavy visibility loss
    WIND = "wind"    # strong wind + dust


@dataclass
class WeatherSystem:
    """A moving weather cell; position and radius in grid units."""
    x: float
    y: float
    radius: float
    kind: WeatherKind
    intensity: float  # 0.5 .. 1.0
    drift_x: float = 0.0
    drift_y: float = 0.0


@dataclass(frozen=True)
class HazardCell:
    wind: float        # km/h, 0..100
    rain: float        # mm/h, 0..50
    visibility: float  # %, 100 = clear
    risk: float        # 0..100

    CLEAR: ClassVar["HazardCell"]

    def to_dict(self) -> dict:
        return {"wind": self.wind, "rain": self.rain, "visibility": self.visibility, "risk": self.risk}


HazardCell.CLEAR = HazardCell(0.0, 0.0, 100.0, 0.0)


class MissionStatus(Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    PAUSED = "paused"
    ABORTED = "aborted"
    COMPLETE = "complete"

    @property
    def finished(self) -> bool:
        return self in (MissionStatus.ABORTED, MissionStatus.COMPLETE)


@dataclass
class MissionState:
    route: Route
    goal: LatLng
    segment: int = 0
    progress: float = 0.0  # 0 <= progress < 1 within the current segment
    battery: float = 100.0
    status: MissionStatus = MissionStatus.INACTIVE
    position: Optional[LatLng] = None
    reroutes: int = 0
    trail: Route = field(default_factory=list)
