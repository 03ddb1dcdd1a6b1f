# path: speed-breaker-api/speedbreaker/utils/geo.py

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple
import math

LatLonTuple = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0
# Segments shorter than this (1 m) fall back to the nearer endpoint.
MIN_SEGMENT_KM = 0.001


def is_valid_point(point: LatLonTuple) -> bool:
    try:
        lat, lon = float(point[0]), float(point[1])
    except (TypeError, ValueError, IndexError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def bbox_wgs84(points_latlon: Iterable[LatLonTuple]) -> Dict[str, float]:
    pts = list(points_latlon)
    if not pts:
        raise ValueError("bbox needs at least one point")
    lats = [p[0] for p in pts]
    lons = [p[1] for p in pts]
    return {
        "min_lat": min(lats),
        "min_lon": min(lons),
        "max_lat": max(lats),
        "max_lon": max(lons),
    }


def haversine_km(p1: LatLonTuple, p2: LatLonTuple) -> float:
    phi1 = math.radians(p1[0])
    phi2 = math.radians(p2[0])
    dphi = math.radians(p2[0] - p1[0])
    dlmb = math.radians(p2[1] - p1[1])

    s = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    # Rounding can push s a hair past 1 for antipodal points.
    s = min(1.0, max(0.0, s))
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(s), math.sqrt(1 - s))


def distance_point_to_segment_km(point: LatLonTuple, seg_start: LatLonTuple, seg_end: LatLonTuple) -> float:
    """
    Distance (km) from point to the segment [seg_start, seg_end].

    The projection is a flat-earth dot product on raw lat/lon degrees, which is
    fine for the few-hundred-metre segments of a simulated route but is not a
    geodesic cross-track distance. Non-finite input returns inf.
    """
    if not (is_valid_point(point) and is_valid_point(seg_start) and is_valid_point(seg_end)):
        return math.inf

    dist_to_start = haversine_km(point, seg_start)
    dist_to_end = haversine_km(point, seg_end)

    if haversine_km(seg_start, seg_end) < MIN_SEGMENT_KM:
        return min(dist_to_start, dist_to_end)

    d_lat = seg_end[0] - seg_start[0]
    d_lon = seg_end[1] - seg_start[1]
    length_sq = d_lat * d_lat + d_lon * d_lon
    if length_sq == 0:
        return min(dist_to_start, dist_to_end)

    t = ((point[0] - seg_start[0]) * d_lat + (point[1] - seg_start[1]) * d_lon) / length_sq
    if t < 0:
        return dist_to_start
    if t > 1:
        return dist_to_end

    proj = (seg_start[0] + t * d_lat, seg_start[1] + t * d_lon)
    return haversine_km(point, proj)


def bearing_deg_true(a: LatLonTuple, b: LatLonTuple) -> float:
    # Initial bearing (forward azimuth), degrees true, [0,360)
    phi1 = math.radians(a[0])
    phi2 = math.radians(b[0])
    dlmb = math.radians(b[1] - a[1])

    y = math.sin(dlmb) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlmb)
    brng = math.degrees(math.atan2(y, x))
    return (brng + 360.0) % 360.0


def polyline_length_km(points_latlon: List[LatLonTuple]) -> float:
    total = 0.0
    for i in range(1, len(points_latlon)):
        total += haversine_km(points_latlon[i - 1], points_latlon[i])
    return total
