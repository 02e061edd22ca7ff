"""
Geometry primitives over WGS84 (lng, lat) coordinates.

Planar work (buffering, point-to-line distances) happens in a local azimuthal
equidistant frame centred on the geometry so that distances are in meters;
point-to-point distances are geodesic on the WGS84 ellipsoid.
"""
import logging
from functools import lru_cache

import pyproj
import shapely
from shapely.errors import ShapelyError
from shapely.geometry import LineString, MultiLineString, Point

logger = logging.getLogger(__name__)

WGS84 = "EPSG:4326"

# Failures that a single malformed feature can raise inside shapely/pyproj
GEOMETRY_ERRORS = (ShapelyError, ValueError, TypeError, AttributeError)


@lru_cache(maxsize=256)
def _local_transformers(lng, lat):
    local = pyproj.CRS.from_proj4(
        f"+proj=aeqd +lat_0={lat} +lon_0={lng} +datum=WGS84 +units=m +no_defs"
    )
    forward = pyproj.Transformer.from_crs(WGS84, local, always_xy=True)
    inverse = pyproj.Transformer.from_crs(local, WGS84, always_xy=True)
    return forward, inverse


def _crossing_points(geom):
    if geom.geom_type == "Point":
        yield (geom.x, geom.y)
    elif geom.geom_type == "LineString":
        cs = list(geom.coords)
        yield cs[0]
        yield cs[-1]
    elif hasattr(geom, "geoms"):
        for part in geom.geoms:
            yield from _crossing_points(part)


class GeometryEngine:
    """Single entry point for every geometric operation the planner needs."""

    def __init__(self, ellps="WGS84"):
        self.geod = pyproj.Geod(ellps=ellps)

    # -- projection helpers -------------------------------------------------
    @staticmethod
    def _frame(geom):
        c = geom.centroid
        # rounded so nearby geometries share a cached transformer
        return _local_transformers(round(c.x, 3), round(c.y, 3))

    def to_local(self, geom, frame=None):
        forward, _ = frame or self._frame(geom)
        return shapely.transform(geom, forward.transform, interleaved=False)

    def to_wgs84(self, geom, frame):
        _, inverse = frame
        return shapely.transform(geom, inverse.transform, interleaved=False)

    # -- operations ---------------------------------------------------------
    def buffer(self, geom, distance_m, resolution=16):
        """Buffer a lng/lat geometry by ``distance_m`` meters."""
        frame = self._frame(geom)
        local = self.to_local(geom, frame).buffer(distance_m, resolution)
        return self.to_wgs84(local, frame)

    def circle(self, lng, lat, radius_m, resolution=16):
        return self.buffer(Point(lng, lat), radius_m, resolution)

    @staticmethod
    def intersects(a, b):
        try:
            return bool(a.intersects(b))
        except GEOMETRY_ERRORS as exc:
            logger.debug("intersects test failed: %s", exc)
            return False

    @staticmethod
    def line_intersections(a, b):
        """
        Return the points where two linear geometries cross or touch.

        Shared (collinear) stretches contribute their end points.
        """
        inter = a.intersection(b)
        if inter.is_empty:
            return []
        # remove exact repeats, keep order
        seen = set()
        out = []
        for p in _crossing_points(inter):
            key = (p[0], p[1])
            if key not in seen:
                seen.add(key)
                out.append(key)
        return out

    def distance_m(self, p1, p2):
        """Geodesic distance in meters between two (lng, lat) pairs."""
        _, _, d = self.geod.inv(p1[0], p1[1], p2[0], p2[1])
        return abs(d)

    def point_to_geometry_m(self, point, geom):
        """Shortest distance in meters from a (lng, lat) point to a geometry."""
        pt = Point(point)
        frame = _local_transformers(round(pt.x, 3), round(pt.y, 3))
        return self.to_local(pt, frame).distance(self.to_local(geom, frame))

    @staticmethod
    def bbox(geom):
        """(min_lng, min_lat, max_lng, max_lat)"""
        return tuple(geom.bounds)

    @staticmethod
    def boundary_line(polygon):
        """Outline of a polygon as a MultiLineString (holes included)."""
        boundary = polygon.boundary
        if isinstance(boundary, LineString):
            return MultiLineString([boundary])
        return boundary
