"""
Turn the many shapes an event route arrives in into one MultiLineString.

Each route stays its own part: joining the end of one route to the start of
the next would invent a closed stretch of road that nobody closed.
"""
import logging
import math
from collections.abc import Mapping

from shapely.geometry import LineString, MultiLineString

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Route input that cannot be turned into a usable line geometry."""


def _is_number(v):
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _is_pair(c):
    return (
        isinstance(c, (list, tuple))
        and len(c) >= 2
        and _is_number(c[0])
        and _is_number(c[1])
    )


def is_valid_coordinate(c):
    if not _is_pair(c):
        return False
    lng, lat = float(c[0]), float(c[1])
    if not (math.isfinite(lng) and math.isfinite(lat)):
        return False
    return -180 <= lng <= 180 and -90 <= lat <= 90


def _swap_if_lat_lng(c):
    # [lat, lng] when the first value fits a latitude and the second does not
    if _is_pair(c) and abs(c[0]) <= 90 and abs(c[1]) <= 180:
        return (c[1], c[0])
    return c


def _clean(coords):
    """Keep valid coordinates and drop consecutive duplicates."""
    out = []
    for c in coords:
        if not is_valid_coordinate(c):
            continue
        pt = (float(c[0]), float(c[1]))
        if not out or pt != out[-1]:
            out.append(pt)
    return out


def _parts_from_mapping(obj):
    kind = obj.get("type")
    if kind == "Feature":
        geom = obj.get("geometry")
        return _parts_from_mapping(geom) if geom else []
    if kind == "FeatureCollection":
        parts = []
        for feat in obj.get("features") or []:
            parts.extend(_parts_from_mapping(feat))
        return parts
    if kind == "LineString":
        return [list(obj.get("coordinates") or [])]
    if kind == "MultiLineString":
        return [list(p) for p in obj.get("coordinates") or []]
    # route record from an event file
    if isinstance(obj.get("geometry"), (list, tuple)):
        return [list(obj["geometry"])]
    if isinstance(obj.get("coordinates"), (list, tuple)):
        return [[_swap_if_lat_lng(c) for c in obj["coordinates"]]]
    raise ValidationError(f"Invalid route geometry format: {str(obj)[:100]}")


def _raw_parts(route):
    if isinstance(route, MultiLineString):
        return [list(ln.coords) for ln in route.geoms]
    if isinstance(route, LineString):
        return [list(route.coords)]
    if isinstance(route, Mapping):
        return _parts_from_mapping(route)
    if isinstance(route, (list, tuple)):
        if not route:
            return []
        if _is_pair(route[0]):
            # flat list of (lng, lat)
            return [list(route)]
        parts = []
        for item in route:
            if isinstance(item, (LineString, MultiLineString, Mapping)):
                parts.extend(_raw_parts(item))
            elif isinstance(item, (list, tuple)):
                parts.append(list(item))
            else:
                raise ValidationError(f"Unrecognized route element: {type(item).__name__}")
        return parts
    raise ValidationError(f"Invalid route geometry format: {type(route).__name__}")


def is_empty_route(route):
    """True when the input carries no coordinates at all (no routes, or only empty ones)."""
    if route is None:
        return True
    return not any(_raw_parts(route))


def normalize_route(route):
    """
    Normalize route input to a MultiLineString in (lng, lat).

    Parameters
    ----------
    route : sequence, mapping or shapely geometry
        A flat list of (lng, lat) pairs, a list of such lists (one per route),
        route records with ``geometry`` or ``coordinates``, a GeoJSON
        (Multi)LineString / Feature, or a shapely (Multi)LineString.

    Returns
    -------
    MultiLineString
        One part per input route, in input order.

    Raises
    ------
    ValidationError
        If the shape is unrecognized or fewer than two valid coordinates
        remain in any route.
    """
    raw = _raw_parts(route)
    total = 0
    lines = []
    for i, part in enumerate(raw):
        coords = _clean(part)
        total += len(coords)
        if len(coords) < 2:
            if part:
                logger.warning("Dropping route %d: %d usable coordinates", i, len(coords))
            continue
        lines.append(coords)

    if total < 2 or not lines:
        raise ValidationError(
            f"Route has insufficient valid coordinates: found {total} across {len(raw)} route(s)"
        )
    logger.info("Using %d valid coordinates in %d route(s)", sum(len(ln) for ln in lines), len(lines))
    return MultiLineString(lines)


def validate_route_line(route_line):
    """Raise ValidationError unless every part has at least two coordinates."""
    if route_line is None or route_line.is_empty:
        raise ValidationError("Route line is empty")
    for part in getattr(route_line, "geoms", [route_line]):
        if len(part.coords) < 2:
            raise ValidationError(
                f"Route line is invalid or has insufficient coordinates. Found {len(part.coords)} coordinates."
            )
    return route_line
