# tests/test_build_network.py
import networkx as nx
import pytest
from shapely.geometry import LineString

from closure_planner.build_network import roads_from_graph, route_bbox
from closure_planner.models import RoadClass

from conftest import offset


def _graph():
    G = nx.MultiDiGraph(crs="epsg:4326")
    G.add_node(1, x=-79.400, y=43.650)
    G.add_node(2, x=-79.390, y=43.650)
    G.add_node(3, x=-79.390, y=43.660)
    curve = LineString([(-79.400, 43.650), (-79.395, 43.651), (-79.390, 43.650)])
    main = {"osmid": 100, "name": "King St", "highway": "primary", "lanes": ["4", "2"],
            "maxspeed": "50", "oneway": False, "geometry": curve}
    G.add_edge(1, 2, key=0, **main)
    G.add_edge(2, 1, key=0, **{**main, "geometry": LineString(curve.coords[::-1])})
    G.add_edge(2, 3, key=0, osmid=[200, 201], highway=["residential", "tertiary"], oneway=True)
    G.add_edge(1, 3, key=0, osmid=300, highway="footway")
    return G


def test_roads_from_graph():
    roads = roads_from_graph(_graph())
    assert [r.id for r in roads] == [100, 200]

    king, side = roads
    assert king.name == "King St"
    assert king.road_class is RoadClass.PRIMARY
    assert king.lanes == 4
    assert king.maxspeed == 50
    assert len(king.geometry.coords) == 3

    assert side.name == "Unnamed Road"
    assert side.road_class is RoadClass.RESIDENTIAL
    assert side.oneway is True
    # no stored geometry: straight line between the nodes
    assert list(side.geometry.coords) == [(-79.390, 43.650), (-79.390, 43.660)]


def test_route_bbox_is_buffered():
    route = [offset(0, 0), offset(1000, 0)]
    west, south, east, north = route_bbox(route, buffer_m=500)
    assert west == pytest.approx(offset(-500, 0)[0], abs=1e-4)
    assert east == pytest.approx(offset(1500, 0)[0], abs=1e-4)
    assert south == pytest.approx(offset(0, -500)[1], abs=1e-4)
    assert north == pytest.approx(offset(0, 500)[1], abs=1e-4)
