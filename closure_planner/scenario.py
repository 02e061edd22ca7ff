"""
Assemble decision-ready scenarios for the recommender.

A scenario is one boundary point seen during one event phase: the junction
around it, how close it sits to the start/finish and support stations, and
a coarse risk level.
"""
import logging
from dataclasses import replace

from .config import POI_PROXIMITY_M, SEARCH_RADIUS_M
from .geometry import GeometryEngine
from .models import (
    ClosureContext,
    Location,
    NearbyPOIs,
    PointOfInterest,
    RiskLevel,
    Scenario,
)
from .road_network import load_road_network
from .spatial_index import SpatialIndex
from .topology import analyze_intersection_topology

logger = logging.getLogger(__name__)


def default_phases():
    return [{"id": "all", "name": "All Day"}]


def _as_poi(p):
    return p if isinstance(p, PointOfInterest) else PointOfInterest.from_dict(p)


def _mentions(poi, word):
    return word in poi.type.lower() or word in poi.description.lower()


def _is_water(poi):
    return poi.type.lower() == "waterstation" or _mentions(poi, "water")


def _nearest_m(origin, pois, engine):
    if not pois:
        return None
    return min(engine.distance_m(origin, (p.lng, p.lat)) for p in pois)


def nearby_pois(point, pois, engine=None):
    """Geodesic distances from a (lng, lat) point to the nearest POI of each kind."""
    engine = engine or GeometryEngine()
    pois = [_as_poi(p) for p in pois or []]
    return NearbyPOIs(
        start_m=_nearest_m(point, [p for p in pois if _mentions(p, "start")], engine),
        finish_m=_nearest_m(point, [p for p in pois if _mentions(p, "finish")], engine),
        medical_m=_nearest_m(point, [p for p in pois if p.type.lower() == "medical"], engine),
        waterstation_m=_nearest_m(point, [p for p in pois if _is_water(p)], engine),
    )


def classify_risk(intersection, near):
    if near.start_m is not None and near.start_m < POI_PROXIMITY_M:
        return RiskLevel.HIGH
    if near.finish_m is not None and near.finish_m < POI_PROXIMITY_M:
        return RiskLevel.HIGH
    if intersection.degree >= 4:
        return RiskLevel.HIGH
    if intersection.degree == 3:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def assess_risk(location, pois, intersection, engine=None):
    """
    Score-based risk: junction complexity plus race-info and medical POIs
    within ``POI_PROXIMITY_M`` of the location.
    """
    engine = engine or GeometryEngine()
    if intersection.degree >= 4:
        score = 3
    elif intersection.degree == 3:
        score = 2
    else:
        score = 1

    for poi in (_as_poi(p) for p in pois or []):
        d = engine.distance_m((location.lng, location.lat), (poi.lng, poi.lat))
        if d < POI_PROXIMITY_M:
            if poi.type == "raceinfo":
                score += 2
            if poi.type == "medical":
                score += 1

    if score >= 5:
        return RiskLevel.HIGH
    if score >= 3:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def build_scenario(boundary_point, intersection, pois=(), closure_context=None, detour=None, *, engine=None):
    """Scenario for one boundary point under one closure context (phase)."""
    closure_context = ClosureContext.from_dict(closure_context)
    near = nearby_pois(boundary_point.point, pois, engine)
    return Scenario(
        phase=closure_context.phase,
        location=Location(lat=boundary_point.lat, lng=boundary_point.lng, node_id=boundary_point.road_id),
        intersection=intersection,
        approaches=intersection.approaches if intersection else (),
        closure_context=closure_context,
        nearby_pois=near,
        risk=classify_risk(intersection, near) if intersection else RiskLevel.LOW,
        detour=detour,
    )


def build_scenarios(boundary_points, roads, pois=(), phases=None, closure_context=None, *, engine=None):
    """
    One scenario per (boundary point, phase).

    The topology around each point is analysed once and shared across phases.
    """
    engine = engine or GeometryEngine()
    roads = load_road_network(roads)
    phases = phases or default_phases()
    closure_context = ClosureContext.from_dict(closure_context)
    index = SpatialIndex(engine).index_features(roads)

    scenarios = []
    for bp in boundary_points:
        intersection = analyze_intersection_topology(bp, roads, SEARCH_RADIUS_M, engine=engine, index=index)
        if intersection is None:
            continue
        for phase in phases:
            ctx = replace(closure_context, phase=str(phase["id"]))
            scenarios.append(build_scenario(bp, intersection, pois, ctx, engine=engine))
    logger.info("Built %d scenarios for %d boundary points", len(scenarios), len(boundary_points))
    return scenarios
