# tests/test_spatial_index.py
from shapely.geometry import LineString

from closure_planner.spatial_index import SpatialIndex

from conftest import offset, road


def _roads():
    return [
        road("a", (0, 0), (200, 0)),
        road("b", (0, 500), (200, 500)),
        road("c", (100, -100), (100, 100)),
    ]


def test_empty_index_returns_nothing():
    idx = SpatialIndex()
    assert idx.query_bbox((-180, -90, 180, 90)) == []
    assert idx.query_point(*offset(0, 0), 100) == []


def test_query_bbox_keeps_index_order():
    idx = SpatialIndex().index_features(_roads())
    west, south = offset(-10, -200)
    east, north = offset(300, 600)
    assert [r.id for r in idx.query_bbox((west, south, east, north))] == ["a", "b", "c"]


def test_query_point_filters_by_real_distance():
    idx = SpatialIndex().index_features(_roads())
    lng, lat = offset(100, 50)
    assert [r.id for r in idx.query_point(lng, lat, 60)] == ["a", "c"]
    assert [r.id for r in idx.query_point(lng, lat, 10)] == ["c"]


def test_query_intersects():
    idx = SpatialIndex().index_features(_roads())
    probe = LineString([offset(-50, 20), offset(250, 20)])
    assert [r.id for r in idx.query_intersects(probe)] == ["c"]


def test_index_features_appends_and_clear_resets():
    roads = _roads()
    idx = SpatialIndex().index_features(roads[:2])
    idx.index_features(roads[2])
    assert len(idx) == 3
    idx.clear()
    assert len(idx) == 0
    assert idx.query_intersects(roads[0].geometry) == []
