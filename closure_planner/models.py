"""
Records passed between the stages of the closure planner.

Roads, boundary points and devices are frozen: every stage reads what the
previous one produced and builds new records instead of editing them.
"""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RoadClass(str, Enum):
    MOTORWAY = "motorway"
    TRUNK = "trunk"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
    RESIDENTIAL = "residential"
    UNCLASSIFIED = "unclassified"
    OTHER = "other"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        # osmnx may hand back a list when merged edges disagree
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        try:
            return cls(str(value or "").lower().strip())
        except ValueError:
            return cls.OTHER


class BoundaryStatus(str, Enum):
    INTERSECTION = "intersection"
    BOUNDARY = "boundary"


class IntersectionType(str, Enum):
    DEAD_END = "dead_end"
    STRAIGHT = "straight"
    T = "T"
    FOUR_WAY = "four_way"
    MULTI_LEG = "multi_leg"

    @classmethod
    def from_degree(cls, degree):
        if degree <= 1:
            return cls.DEAD_END
        if degree == 2:
            return cls.STRAIGHT
        if degree == 3:
            return cls.T
        if degree == 4:
            return cls.FOUR_WAY
        return cls.MULTI_LEG


class BoundaryType(str, Enum):
    OPEN_TO_CLOSED = "open_to_closed"
    PARTIAL_CLOSURE = "partial_closure"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class RoadFeature:
    id: Any
    geometry: Any  # shapely LineString / MultiLineString, (lng, lat)
    name: str = "Unnamed Road"
    road_class: RoadClass = RoadClass.OTHER
    lanes: int = 1
    maxspeed: Optional[int] = None
    oneway: bool = False


@dataclass(frozen=True)
class BoundaryPoint:
    id: str
    point: Tuple[float, float]  # (lng, lat)
    road_id: Any
    road_name: str
    road_class: RoadClass
    status: BoundaryStatus
    road_ids: Tuple[Any, ...] = ()
    distance_to_edge_m: float = 0.0

    @property
    def lng(self):
        return self.point[0]

    @property
    def lat(self):
        return self.point[1]


@dataclass(frozen=True)
class Approach:
    road_id: Any
    road_name: str
    road_class: RoadClass
    oneway: bool
    lanes: int
    speed_est: int
    status: str = "open"


@dataclass(frozen=True)
class Intersection:
    type: IntersectionType
    degree: int
    approaches: Tuple[Approach, ...]
    center: Tuple[float, float]


@dataclass(frozen=True)
class ClosureContext:
    phase: str = "all"
    boundary_type: BoundaryType = BoundaryType.OPEN_TO_CLOSED
    blocks_straight: bool = False
    creates_one_way: bool = False

    @classmethod
    def from_dict(cls, data):
        if isinstance(data, cls):
            return data
        data = dict(data or {})
        return cls(
            phase=str(data.get("phase") or "all"),
            boundary_type=BoundaryType(data.get("boundary_type") or BoundaryType.OPEN_TO_CLOSED),
            blocks_straight=bool(data.get("blocks_straight", False)),
            creates_one_way=bool(data.get("creates_one_way", False)),
        )


@dataclass(frozen=True)
class PointOfInterest:
    id: Any
    type: str
    lat: float
    lng: float
    description: str = ""

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get("id"),
            type=str(data.get("type") or ""),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class NearbyPOIs:
    start_m: Optional[float] = None
    finish_m: Optional[float] = None
    medical_m: Optional[float] = None
    waterstation_m: Optional[float] = None


@dataclass(frozen=True)
class Location:
    lat: float
    lng: float
    node_id: Any = None


@dataclass
class Scenario:
    phase: str
    location: Location
    intersection: Optional[Intersection]
    approaches: Tuple[Approach, ...]
    closure_context: ClosureContext
    nearby_pois: NearbyPOIs = field(default_factory=NearbyPOIs)
    risk: RiskLevel = RiskLevel.LOW
    detour: Optional[Dict[str, Any]] = None
    constraints: Dict[str, Any] = field(
        default_factory=lambda: {"inventory": {}, "preferences": {}}
    )


@dataclass(frozen=True)
class Device:
    code: str
    quantity: int
    location: str
    offset_m: int
    reason: str
    confidence: float
    phase: str
    lat: float
    lng: float
    cost: Optional[float] = None

    def to_dict(self):
        return asdict(self)


@dataclass
class ClosureResult:
    closure_polygon: Any = None
    affected_roads: list = field(default_factory=list)
    boundary_points: list = field(default_factory=list)
