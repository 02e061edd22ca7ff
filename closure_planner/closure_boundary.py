"""
Find where the closed corridor around an event route meets the open network.

The corridor is the route buffered by a fixed distance. Its edge is an
arbitrary cut through the street grid, so traffic control belongs at the
real junction nearest the edge, not at the edge itself:

* pass A keeps road-road junctions of affected roads that lie within
  ``JUNCTION_SNAP_M`` of the corridor edge;
* pass B covers roads with no such junction (cul-de-sacs, dead ends) by
  placing a point where the road itself crosses the edge.

Points closer than ``DEDUP_M`` to an earlier point are dropped.
"""
import logging

from .config import BUFFER_M, DEDUP_M, JUNCTION_SNAP_M
from .geometry import GEOMETRY_ERRORS, GeometryEngine
from .models import BoundaryPoint, BoundaryStatus, ClosureResult
from .road_network import load_road_network
from .route_geometry import is_empty_route, normalize_route, validate_route_line
from .spatial_index import SpatialIndex

logger = logging.getLogger(__name__)


def _junction_candidates(affected, boundary_line, engine, snap_m, merge_m):
    """Pass A: road-road junctions near the corridor edge, merged per location."""
    junctions = []  # [point, roads meeting there, distance to edge, id]
    position = {id(r): k for k, r in enumerate(affected)}
    pair_index = SpatialIndex(engine).index_features(affected)

    for i, a in enumerate(affected):
        for b in pair_index.query_bbox(a.geometry.bounds):
            if position[id(b)] <= i:
                continue
            try:
                crossings = engine.line_intersections(a.geometry, b.geometry)
            except GEOMETRY_ERRORS as exc:
                logger.warning("Intersection of roads %s and %s failed: %s", a.id, b.id, exc)
                continue

            for k, pt in enumerate(crossings):
                try:
                    d_edge = engine.point_to_geometry_m(pt, boundary_line)
                except GEOMETRY_ERRORS as exc:
                    logger.warning("Distance to corridor edge failed at %s: %s", pt, exc)
                    continue
                if d_edge > snap_m:
                    continue

                for j in junctions:
                    if engine.distance_m(j[0], pt) < merge_m:
                        for road in (a, b):
                            if all(r.id != road.id for r in j[1]):
                                j[1].append(road)
                        break
                else:
                    junctions.append([pt, [a, b], d_edge, f"intersection-{a.id}-{b.id}-{k}"])

    points = []
    for pt, roads, d_edge, pid in junctions:
        first = roads[0]
        points.append(BoundaryPoint(
            id=pid,
            point=pt,
            road_id=first.id,
            road_name=first.name,
            road_class=first.road_class,
            status=BoundaryStatus.INTERSECTION,
            road_ids=tuple(r.id for r in roads),
            distance_to_edge_m=d_edge,
        ))
    return points


def _edge_crossings(affected, junctions, boundary_line, engine, represented_m):
    """Pass B: direct road/edge crossings for roads without a nearby junction."""
    points = []
    for road in affected:
        try:
            represented = any(
                engine.point_to_geometry_m(j.point, road.geometry) <= represented_m
                for j in junctions
            )
            if represented:
                continue
            crossings = engine.line_intersections(road.geometry, boundary_line)
        except GEOMETRY_ERRORS as exc:
            logger.warning("Error finding edge crossings for road %s: %s", road.id, exc)
            continue

        for k, pt in enumerate(crossings):
            points.append(BoundaryPoint(
                id=f"boundary-{road.id}-{k}",
                point=pt,
                road_id=road.id,
                road_name=road.name,
                road_class=road.road_class,
                status=BoundaryStatus.BOUNDARY,
                road_ids=(road.id,),
                distance_to_edge_m=0.0,
            ))
    return points


def dedupe_points(points, min_spacing_m=DEDUP_M, engine=None):
    """Drop points closer than ``min_spacing_m`` to an earlier kept point."""
    engine = engine or GeometryEngine()
    kept = []
    for p in points:
        if all(engine.distance_m(p.point, q.point) >= min_spacing_m for q in kept):
            kept.append(p)
    return kept


def find_closure_boundaries(route, roads, buffer_m=BUFFER_M, *, engine=None, index=None):
    """
    Compute the closure corridor and the points where open roads meet it.

    Parameters
    ----------
    route : any route shape accepted by ``normalize_route``
        Event route(s) in (lng, lat).
    roads : list of RoadFeature or GeoJSON FeatureCollection
        Road network around the route.
    buffer_m : float
        Half-width of the closed corridor in meters.
    engine : GeometryEngine, optional
    index : SpatialIndex, optional
        Prebuilt index over ``roads``; built here when omitted.

    Returns
    -------
    ClosureResult
        Empty (no polygon, no roads, no points) for an empty route or network.
    """
    roads = load_road_network(roads)
    if is_empty_route(route) or not roads:
        return ClosureResult()

    engine = engine or GeometryEngine()
    route_line = validate_route_line(normalize_route(route))

    # 1. Closure polygon
    closure_polygon = engine.buffer(route_line, buffer_m)

    # 2. Roads touching the corridor, in network order
    if index is None:
        index = SpatialIndex(engine).index_features(roads)
    affected = index.query_intersects(closure_polygon)
    logger.info("%d of %d roads touch the closure corridor", len(affected), len(roads))

    # 3. Boundary points
    boundary_line = engine.boundary_line(closure_polygon)
    junctions = _junction_candidates(affected, boundary_line, engine, JUNCTION_SNAP_M, DEDUP_M)
    crossings = _edge_crossings(affected, junctions, boundary_line, engine, DEDUP_M)

    # 4. Spacing
    boundary_points = dedupe_points(junctions + crossings, DEDUP_M, engine)
    logger.info(
        "Found %d boundary points (%d junctions, %d edge crossings before dedup)",
        len(boundary_points), len(junctions), len(crossings),
    )

    return ClosureResult(
        closure_polygon=closure_polygon,
        affected_roads=affected,
        boundary_points=boundary_points,
    )
