import math

from shapely.geometry import box
from shapely.strtree import STRtree

from .geometry import GeometryEngine

METERS_PER_DEGREE = 111_000


class SpatialIndex:
    """
    Bounding-box index over road features (anything with a ``geometry``).

    Query results always come back in the order the features were indexed,
    so callers see the same ordering as a plain scan of the network.
    """

    def __init__(self, engine=None):
        self.engine = engine or GeometryEngine()
        self.features = []
        self._tree = None

    def index_features(self, features):
        if not isinstance(features, (list, tuple)):
            features = [features]
        self.features.extend(features)
        # STRtree is immutable, rebuild over everything indexed so far
        self._tree = STRtree([f.geometry for f in self.features])
        return self

    def clear(self):
        self.features = []
        self._tree = None
        return self

    def __len__(self):
        return len(self.features)

    def _candidates(self, geom):
        if self._tree is None:
            return []
        hits = sorted(int(i) for i in self._tree.query(geom))
        return [self.features[i] for i in hits]

    def query_bbox(self, bbox):
        """Features whose envelope overlaps (min_lng, min_lat, max_lng, max_lat)."""
        return self._candidates(box(*bbox))

    def query_point(self, lng, lat, radius_m=100):
        """Features within ``radius_m`` meters of a point."""
        pad_lat = radius_m / METERS_PER_DEGREE
        pad_lng = radius_m / (METERS_PER_DEGREE * abs(math.cos(math.radians(lat))) or 1)
        candidates = self.query_bbox((lng - pad_lng, lat - pad_lat, lng + pad_lng, lat + pad_lat))
        return [
            f for f in candidates
            if self.engine.point_to_geometry_m((lng, lat), f.geometry) <= radius_m
        ]

    def query_intersects(self, geometry):
        """Features that truly intersect ``geometry``; failed tests count as misses."""
        return [f for f in self._candidates(geometry) if self.engine.intersects(f.geometry, geometry)]

