import json
import logging

from .bill_of_materials import summarize_devices, total_cost, write_bill_of_materials
from .build_network import fetch_road_network, route_bbox
from .closure_boundary import find_closure_boundaries
from .config import BUFFER_M, INPUTS, PLANS_DIR, SUMMARIES_DIR
from .export_geo import (
    boundary_points_to_geodataframe,
    closure_to_geodataframe,
    devices_to_geodataframe,
    write_geojson,
    write_gpx,
)
from .geometry import GeometryEngine
from .models import ClosureContext
from .recommender import OntarioDeviceRecommender
from .road_network import load_road_network
from .scenario import build_scenarios, default_phases

logger = logging.getLogger(__name__)


def plan_traffic_control(route, roads, pois=(), phases=None, closure_context=None,
                         buffer_m=BUFFER_M, recommender=None):
    """
    Run the whole chain: corridor -> boundary points -> scenarios -> devices.

    Returns a dict with the ClosureResult, the scenarios, the device list of
    each scenario (same order) and all devices flattened.
    """
    engine = GeometryEngine()
    roads = load_road_network(roads)
    phases = phases or default_phases()
    context = ClosureContext.from_dict(closure_context)
    recommender = recommender or OntarioDeviceRecommender()

    closure = find_closure_boundaries(route, roads, buffer_m, engine=engine)
    scenarios = build_scenarios(closure.boundary_points, roads, pois, phases, context, engine=engine)
    per_scenario = [recommender.recommend(s) for s in scenarios]
    devices = [d for group in per_scenario for d in group]
    logger.info("Recommended %d devices across %d scenarios", len(devices), len(scenarios))

    return {
        "closure": closure,
        "scenarios": scenarios,
        "scenario_devices": per_scenario,
        "devices": devices,
    }


def _read_json(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_inputs():
    """
    Read data/inputs: route.geojson (required), roads.geojson (fetched from
    OSM when missing), pois.json, phases.json and closure.json (optional).
    """
    route = _read_json(INPUTS / "route.geojson")
    roads_path = INPUTS / "roads.geojson"
    if roads_path.exists():
        roads = load_road_network(roads_path)
    else:
        logger.info("No roads.geojson, fetching road network from OSM")
        roads = fetch_road_network(route_bbox(route))

    def optional(name, default):
        p = INPUTS / name
        return _read_json(p) if p.exists() else default

    return {
        "route": route,
        "roads": roads,
        "pois": optional("pois.json", []),
        "phases": optional("phases.json", default_phases()),
        "closure_context": optional("closure.json", {}),
    }


def event_name(route, default="Event"):
    """Event title from a route FeatureCollection or Feature (``map_name`` or ``name``)."""
    if not isinstance(route, dict):
        return default
    for props in (route, route.get("properties") or {}):
        for key in ("map_name", "name"):
            if props.get(key):
                return str(props[key])
    return default


def ensure_output_dirs():
    PLANS_DIR.mkdir(parents=True, exist_ok=True)
    SUMMARIES_DIR.mkdir(parents=True, exist_ok=True)


def run():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    ensure_output_dirs()
    inputs = load_inputs()
    plan = plan_traffic_control(**inputs)
    closure, devices = plan["closure"], plan["devices"]

    out_csv = SUMMARIES_DIR / "bill_of_materials.csv"
    bom = summarize_devices(devices, inputs["phases"], event_name(inputs["route"]))
    write_bill_of_materials(bom, out_csv)

    out_points = PLANS_DIR / "boundary_points.geojson"
    write_geojson(boundary_points_to_geodataframe(closure.boundary_points), out_points)
    out_devices = PLANS_DIR / "devices.geojson"
    write_geojson(devices_to_geodataframe(devices), out_devices)
    out_gpx = PLANS_DIR / "devices.gpx"
    write_gpx(devices, out_gpx)
    if closure.closure_polygon is not None:
        write_geojson(closure_to_geodataframe(closure.closure_polygon), PLANS_DIR / "closure.geojson")

    print(f"{len(closure.boundary_points)} boundary points, {len(devices)} devices, "
          f"estimated cost ${total_cost(devices):,.2f}")
    print("Wrote outputs to:", out_csv, out_points, out_devices, out_gpx)


if __name__ == "__main__":
    run()
