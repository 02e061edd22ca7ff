import logging
import re
from collections.abc import Mapping
from pathlib import Path

import geopandas as gpd
from shapely.geometry import shape

from .geometry import GEOMETRY_ERRORS
from .models import RoadClass, RoadFeature

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*(\d+)")


def parse_int(value):
    """Leading integer of an OSM tag value ("2;3" -> 2, "50 mph" -> 50), else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
        return parse_int(value)
    if isinstance(value, (int, float)):
        # NaN from a GeoDataFrame column
        return int(value) if value == value else None
    m = _LEADING_INT.match(str(value))
    return int(m.group(1)) if m else None


def parse_oneway(value):
    if isinstance(value, bool):
        return value
    return str(value).lower().strip() in {"yes", "true", "1"}


def _clean_name(name):
    if isinstance(name, (list, tuple)):
        name = name[0] if name else None
    if name is None or (isinstance(name, float) and name != name):
        return "Unnamed Road"
    return str(name) or "Unnamed Road"


def road_from_properties(geometry, props, fallback_id=None):
    lanes = parse_int(props.get("lanes"))
    return RoadFeature(
        id=props.get("id", fallback_id),
        geometry=geometry,
        name=_clean_name(props.get("name")),
        road_class=RoadClass.parse(props.get("highway")),
        lanes=max(1, lanes) if lanes else 1,
        maxspeed=parse_int(props.get("maxspeed")),
        oneway=parse_oneway(props.get("oneway", False)),
    )


def road_from_feature(feature, fallback_id=None):
    """Build a RoadFeature from a GeoJSON feature mapping."""
    geometry = shape(feature["geometry"])
    if geometry.geom_type not in ("LineString", "MultiLineString"):
        raise ValueError(f"road geometry must be linear, got {geometry.geom_type}")
    if geometry.is_empty:
        raise ValueError("road geometry is empty")
    return road_from_properties(geometry, feature.get("properties") or {}, fallback_id)


def _roads_from_features(features):
    roads = []
    for i, feat in enumerate(features):
        try:
            roads.append(road_from_feature(feat, fallback_id=i))
        except (KeyError, *GEOMETRY_ERRORS) as exc:
            logger.warning("Skipping malformed road feature %s: %s", i, exc)
    return roads


def _roads_from_gdf(gdf):
    if gdf.crs is not None and gdf.crs.to_string() != "EPSG:4326":
        gdf = gdf.to_crs("EPSG:4326")
    roads = []
    for idx, row in gdf.iterrows():
        geom = row.geometry
        if geom is None or geom.is_empty or geom.geom_type not in ("LineString", "MultiLineString"):
            logger.warning("Skipping road row %s without a line geometry", idx)
            continue
        props = row.drop(labels=gdf.geometry.name).to_dict()
        roads.append(road_from_properties(geom, props, fallback_id=idx))
    return roads


def load_road_network(source):
    """
    Load a road network as a list of RoadFeature.

    ``source`` may be a GeoJSON FeatureCollection mapping, a list of features
    or RoadFeatures, a GeoDataFrame, or a path to a GeoJSON file.
    """
    if source is None:
        return []
    if isinstance(source, gpd.GeoDataFrame):
        return _roads_from_gdf(source)
    if isinstance(source, (str, Path)):
        return _roads_from_gdf(gpd.read_file(source))
    if isinstance(source, Mapping):
        if source.get("type") == "FeatureCollection":
            return _roads_from_features(source.get("features") or [])
        return _roads_from_features([source])
    source = list(source)
    if all(isinstance(r, RoadFeature) for r in source):
        return source
    return _roads_from_features(source)

