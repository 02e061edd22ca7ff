# tests/test_scenario.py
import pytest

from closure_planner.geometry import GeometryEngine
from closure_planner.models import (
    BoundaryPoint,
    BoundaryStatus,
    ClosureContext,
    Intersection,
    IntersectionType,
    Location,
    RiskLevel,
    RoadClass,
)
from closure_planner.scenario import (
    assess_risk,
    build_scenario,
    build_scenarios,
    classify_risk,
    default_phases,
    nearby_pois,
)

from conftest import offset, road

engine = GeometryEngine()


def _bp(pid, east_m, north_m=0):
    return BoundaryPoint(
        id=pid, point=offset(east_m, north_m), road_id=pid, road_name=f"{pid} St",
        road_class=RoadClass.RESIDENTIAL, status=BoundaryStatus.BOUNDARY, road_ids=(pid,),
    )


def _poi(pid, kind, east_m, north_m=0, description=""):
    lng, lat = offset(east_m, north_m)
    return {"id": pid, "type": kind, "lat": lat, "lng": lng, "description": description}


def _junction(degree):
    return Intersection(IntersectionType.from_degree(degree), degree, (), offset(0, 0))


# ---- nearby POIs ----
def test_nearest_poi_of_each_kind():
    pois = [
        _poi("s", "start", 150),
        _poi("f", "finish", 900),
        _poi("m1", "medical", 500),
        _poi("m2", "medical", 300),
        _poi("w", "aid", 0, 50, description="Water table"),
    ]
    near = nearby_pois(offset(0, 0), pois)
    assert near.start_m == pytest.approx(150, abs=0.5)
    assert near.finish_m == pytest.approx(900, abs=0.5)
    assert near.medical_m == pytest.approx(300, abs=0.5)
    assert near.waterstation_m == pytest.approx(50, abs=0.5)


def test_no_pois_gives_no_distances():
    near = nearby_pois(offset(0, 0), [])
    assert (near.start_m, near.finish_m, near.medical_m, near.waterstation_m) == (None, None, None, None)


def test_start_can_be_named_in_description():
    near = nearby_pois(offset(0, 0), [_poi("x", "raceinfo", 100, description="Start corral")])
    assert near.start_m == pytest.approx(100, abs=0.5)


# ---- risk ----
def test_risk_near_start_or_finish_is_high():
    near_start = nearby_pois(offset(0, 0), [_poi("s", "start", 150)])
    assert classify_risk(_junction(1), near_start) is RiskLevel.HIGH
    near_finish = nearby_pois(offset(0, 0), [_poi("f", "finish", 199)])
    assert classify_risk(_junction(1), near_finish) is RiskLevel.HIGH


def test_risk_from_junction_complexity():
    far = nearby_pois(offset(0, 0), [_poi("s", "start", 1000)])
    assert classify_risk(_junction(4), far) is RiskLevel.HIGH
    assert classify_risk(_junction(5), far) is RiskLevel.HIGH
    assert classify_risk(_junction(3), far) is RiskLevel.MEDIUM
    assert classify_risk(_junction(2), far) is RiskLevel.LOW


def test_assess_risk_scores_pois():
    lng, lat = offset(0, 0)
    here = Location(lat=lat, lng=lng)
    assert assess_risk(here, [], _junction(2)) is RiskLevel.LOW
    assert assess_risk(here, [], _junction(3)) is RiskLevel.LOW
    assert assess_risk(here, [_poi("m", "medical", 50)], _junction(3)) is RiskLevel.MEDIUM
    info = [_poi("i", "raceinfo", 50)]
    assert assess_risk(here, info, _junction(4)) is RiskLevel.HIGH
    # too far away to count
    assert assess_risk(here, [_poi("i", "raceinfo", 500)], _junction(2)) is RiskLevel.LOW


# ---- scenarios ----
def test_build_scenario_fields():
    bp = _bp("cul", 0)
    ctx = {"phase": "am", "boundary_type": "partial_closure", "blocks_straight": True}
    scenario = build_scenario(bp, _junction(3), [_poi("m", "medical", 100)], ctx)

    assert scenario.phase == "am"
    assert scenario.location.node_id == "cul"
    assert (scenario.location.lng, scenario.location.lat) == bp.point
    assert scenario.closure_context == ClosureContext("am", "partial_closure", True, False)
    assert scenario.nearby_pois.medical_m == pytest.approx(100, abs=0.5)
    assert scenario.risk is RiskLevel.MEDIUM
    assert scenario.constraints == {"inventory": {}, "preferences": {}}
    assert scenario.detour is None


def test_one_scenario_per_point_and_phase():
    roads = [road("a", (0, -200), (0, 200)), road("b", (500, -200), (500, 200))]
    points = [_bp("a", 0), _bp("b", 500)]
    phases = [{"id": "setup", "name": "Setup"}, {"id": 2, "name": "Race"}]

    scenarios = build_scenarios(points, roads, phases=phases, closure_context={"blocks_straight": True})

    assert len(scenarios) == len(points) * len(phases)
    assert [s.phase for s in scenarios] == ["setup", "2", "setup", "2"]
    assert [s.location.node_id for s in scenarios] == ["a", "a", "b", "b"]
    assert all(s.closure_context.blocks_straight for s in scenarios)
    assert scenarios[0].intersection is scenarios[1].intersection


def test_default_phase():
    assert default_phases() == [{"id": "all", "name": "All Day"}]
    scenarios = build_scenarios([_bp("a", 0)], [road("a", (0, -200), (0, 200))])
    assert [s.phase for s in scenarios] == ["all"]
    assert scenarios[0].intersection.type is IntersectionType.DEAD_END
