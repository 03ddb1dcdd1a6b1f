# path: speed-breaker-api/speedbreaker/services/proximity.py

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple
import logging
import math

from speedbreaker import config
from speedbreaker.models.hazard_models import Hazard
from speedbreaker.utils.geo import LatLonTuple, distance_point_to_segment_km, haversine_km

logger = logging.getLogger(__name__)


def valid_hazards(hazards: Iterable[Hazard]) -> List[Hazard]:
    out = []
    for h in hazards:
        if h.has_valid_coordinates:
            out.append(h)
        else:
            logger.warning("Skipping hazard %s: invalid coordinates (%r, %r)", h.id, h.latitude, h.longitude)
    return out


def find_hazards_near_route(
    waypoints: Sequence[LatLonTuple],
    hazards: Iterable[Hazard],
    max_distance_km: Optional[float] = None,
) -> List[Hazard]:
    """
    Hazards within max_distance_km (default config.NEAR_ROUTE_KM) of any route
    segment, in input order.

    Each hazard appears at most once; the first matching segment wins.
    """
    if max_distance_km is None:
        max_distance_km = config.NEAR_ROUTE_KM
    if len(waypoints) < 2:
        return []

    matched = []
    for hazard in valid_hazards(hazards):
        for i in range(len(waypoints) - 1):
            d = distance_point_to_segment_km(hazard.point, waypoints[i], waypoints[i + 1])
            if d < max_distance_km:
                matched.append(hazard)
                break
    return matched


def nearest_hazard(point: LatLonTuple, hazards: Iterable[Hazard]) -> Tuple[Optional[Hazard], float]:
    best: Optional[Hazard] = None
    best_km = math.inf
    for hazard in hazards:
        if not hazard.has_valid_coordinates:
            continue
        d = haversine_km(hazard.point, point)
        if d < best_km:
            best, best_km = hazard, d
    return best, best_km


def hazard_on_segment(
    seg_start: LatLonTuple,
    seg_end: LatLonTuple,
    hazards: Iterable[Hazard],
    max_distance_km: Optional[float] = None,
) -> Optional[Hazard]:
    if max_distance_km is None:
        max_distance_km = config.ALERT_DISTANCE_KM
    for hazard in hazards:
        if not hazard.has_valid_coordinates:
            continue
        if distance_point_to_segment_km(hazard.point, seg_start, seg_end) < max_distance_km:
            return hazard
    return None
