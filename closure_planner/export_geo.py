import geopandas as gpd
import gpxpy
import gpxpy.gpx
from shapely.geometry import Point

WGS84 = "EPSG:4326"


def devices_to_geodataframe(devices):
    """One point feature per device, WGS84."""
    return gpd.GeoDataFrame(
        [d.to_dict() for d in devices],
        geometry=[Point(d.lng, d.lat) for d in devices],
        crs=WGS84,
    )


def boundary_points_to_geodataframe(points):
    rows = [
        {
            "id": p.id,
            "road_id": p.road_id,
            "road_name": p.road_name,
            "road_class": p.road_class.value,
            "status": p.status.value,
            "road_ids": ";".join(str(i) for i in p.road_ids),
            "distance_to_edge_m": round(p.distance_to_edge_m, 1),
        }
        for p in points
    ]
    return gpd.GeoDataFrame(rows, geometry=[Point(p.point) for p in points], crs=WGS84)


def closure_to_geodataframe(closure_polygon):
    return gpd.GeoDataFrame([{"name": "closure"}], geometry=[closure_polygon], crs=WGS84)


def write_geojson(gdf, outfile):
    """Write a GeoDataFrame as GeoJSON in WGS84."""
    if gdf.crs is not None and gdf.crs.to_string() != WGS84:
        gdf = gdf.to_crs(WGS84)
    gdf.to_file(outfile, driver="GeoJSON")


def write_gpx(devices, outfile, name="Traffic control plan"):
    """
    Write device placements as GPX waypoints for field crews.
    """
    gpx = gpxpy.gpx.GPX()
    gpx.name = name
    for d in devices:
        wpt = gpxpy.gpx.GPXWaypoint(
            latitude=d.lat,
            longitude=d.lng,
            name=f"{d.code} x{d.quantity}",
            description=f"{d.location} @ {d.offset_m} m: {d.reason}",
        )
        wpt.type = d.phase
        gpx.waypoints.append(wpt)
    with open(outfile, "w", encoding="utf-8") as f:
        f.write(gpx.to_xml())
