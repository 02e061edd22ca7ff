# tests/conftest.py
import pyproj
import pytest
from shapely.geometry import LineString

from closure_planner.models import RoadClass, RoadFeature

# downtown Toronto
ORIGIN = (-79.40, 43.65)
GEOD = pyproj.Geod(ellps="WGS84")


def offset(east_m, north_m, origin=ORIGIN):
    """(lng, lat) of a point east_m east and north_m north of origin."""
    lng, lat = origin
    if east_m:
        lng, lat, _ = GEOD.fwd(lng, lat, 90 if east_m > 0 else 270, abs(east_m))
    if north_m:
        lng, lat, _ = GEOD.fwd(lng, lat, 0 if north_m > 0 else 180, abs(north_m))
    return (lng, lat)


def road(road_id, *points_m, road_class=RoadClass.RESIDENTIAL, **kw):
    """RoadFeature through points given as (east_m, north_m) from ORIGIN."""
    return RoadFeature(
        id=road_id,
        geometry=LineString([offset(e, n) for e, n in points_m]),
        name=kw.pop("name", f"{road_id} St"),
        road_class=road_class,
        **kw,
    )


@pytest.fixture
def route():
    """800 m event route running east from ORIGIN."""
    return [offset(0, 0), offset(400, 0), offset(800, 0)]
