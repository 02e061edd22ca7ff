import logging

import osmnx as ox
from shapely.geometry import LineString

from .config import DRIVABLE_HIGHWAYS, EXCLUDED_HIGHWAYS, ROUTE_BBOX_BUFFER_M
from .geometry import GeometryEngine
from .road_network import road_from_properties
from .route_geometry import normalize_route

logger = logging.getLogger(__name__)


def _first(value):
    # osmnx keeps a list when simplification merged ways with different tags
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def route_bbox(route, buffer_m=ROUTE_BBOX_BUFFER_M, engine=None):
    """(west, south, east, north) of the route buffered by ``buffer_m``."""
    engine = engine or GeometryEngine()
    return engine.bbox(engine.buffer(normalize_route(route), buffer_m))


def roads_from_graph(G, excluded=EXCLUDED_HIGHWAYS):
    """
    Convert an unprojected osmnx street graph into RoadFeatures.

    Two-way streets appear in G as a pair of opposite edges; only the first
    direction seen is kept.
    """
    roads = []
    seen = set()
    for u, v, k, data in G.edges(keys=True, data=True):
        highway = _first(data.get("highway"))
        if highway in excluded:
            continue
        osmid = _first(data.get("osmid"))
        key = (frozenset((u, v)), osmid)
        if key in seen:
            continue
        seen.add(key)

        geom = data.get("geometry")
        if geom is None:
            # straight edge without stored geometry: use node coordinates
            geom = LineString([
                (G.nodes[u]["x"], G.nodes[u]["y"]),
                (G.nodes[v]["x"], G.nodes[v]["y"]),
            ])
        props = {
            "id": osmid if osmid is not None else f"{u}-{v}-{k}",
            "name": data.get("name"),
            "highway": highway,
            "lanes": data.get("lanes"),
            "maxspeed": data.get("maxspeed"),
            "oneway": data.get("oneway", False),
        }
        roads.append(road_from_properties(geom, props))
    logger.info("Converted %d graph edges into %d roads", G.number_of_edges(), len(roads))
    return roads


def fetch_road_network(bbox, highway_types=DRIVABLE_HIGHWAYS):
    """
    Download the drivable network inside ``bbox`` (west, south, east, north).
    """
    custom_filter = f'["highway"~"^({"|".join(highway_types)})$"]'
    G = ox.graph_from_bbox(bbox, custom_filter=custom_filter, simplify=True, retain_all=True)
    return roads_from_graph(G)
