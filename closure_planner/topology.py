import logging

from .config import DEFAULT_SPEED_KMH, SEARCH_RADIUS_M, SPEED_BY_CLASS
from .geometry import GeometryEngine
from .models import Approach, Intersection, IntersectionType
from .road_network import load_road_network
from .spatial_index import SpatialIndex

logger = logging.getLogger(__name__)


def estimate_speed(road):
    """Posted speed when tagged, otherwise the class default (km/h)."""
    if road.maxspeed:
        return road.maxspeed
    return SPEED_BY_CLASS.get(road.road_class.value, DEFAULT_SPEED_KMH)


def approach_from_road(road):
    return Approach(
        road_id=road.id,
        road_name=road.name or "Unnamed Road",
        road_class=road.road_class,
        oneway=road.oneway,
        lanes=road.lanes if road.lanes and road.lanes > 0 else 1,
        speed_est=estimate_speed(road),
        # closed approaches are not detected; every leg is treated as open
        status="open",
    )


def analyze_intersection_topology(boundary_point, roads, radius_m=SEARCH_RADIUS_M, *, engine=None, index=None):
    """
    Describe the junction around a boundary point.

    Every road intersecting a circle of ``radius_m`` around the point becomes
    one approach; the number of approaches decides the intersection type.
    Returns None when there is no point or no network to look at.
    """
    if boundary_point is None or not roads:
        return None
    engine = engine or GeometryEngine()
    if index is None:
        index = SpatialIndex(engine).index_features(load_road_network(roads))

    lng, lat = boundary_point.point
    search_area = engine.circle(lng, lat, radius_m)
    nearby = index.query_intersects(search_area)

    approaches = tuple(approach_from_road(r) for r in nearby)
    degree = len(approaches)
    logger.debug("Boundary point %s: %d approaches", boundary_point.id, degree)
    return Intersection(
        type=IntersectionType.from_degree(degree),
        degree=degree,
        approaches=approaches,
        center=boundary_point.point,
    )
