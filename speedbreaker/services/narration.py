# path: speed-breaker-api/speedbreaker/services/narration.py

from __future__ import annotations

from typing import List, Optional, Sequence
import math

from speedbreaker import config
from speedbreaker.models.hazard_models import Hazard
from speedbreaker.services.proximity import nearest_hazard
from speedbreaker.utils.geo import LatLonTuple

LANDMARKS = (
    "Main Highway",
    "City Center",
    "Commercial District",
    "Residential Area",
    "University Road",
    "Central Park",
    "Hospital Junction",
    "Metro Station",
    "Ring Road",
    "Industrial Zone",
    "Tech Park",
    "Business District",
)


def landmark_for_waypoint(point: LatLonTuple) -> str:
    # Same coordinates -> same landmark.
    key = math.fmod(point[0] * 1000 + point[1] * 1000, len(LANDMARKS))
    return LANDMARKS[abs(math.floor(key)) % len(LANDMARKS)]


def waypoint_index_for_step(step: int, steps: int, waypoint_count: int) -> int:
    if steps < 2 or waypoint_count < 1:
        return 0
    idx = math.floor(step / (steps - 1) * (waypoint_count - 1))
    return min(max(idx, 0), waypoint_count - 1)


def hazard_warning(hazard: Hazard) -> str:
    msg = f"Speed breaker ahead: {hazard.location}"
    if hazard.severity:
        msg += f" ({hazard.severity} severity)"
    return msg


def generate_route_narration(
    waypoints: Sequence[LatLonTuple],
    nearby_hazards: Sequence[Hazard],
    start_label: str,
    end_label: str,
    steps: Optional[int] = None,
    warn_distance_km: Optional[float] = None,
) -> List[str]:
    if steps is None:
        steps = config.NARRATION_STEPS
    if warn_distance_km is None:
        warn_distance_km = config.NEAR_ROUTE_KM
    if steps < 2:
        raise ValueError(f"Narration needs at least 2 steps, got {steps}")
    if not waypoints:
        return [""] * steps

    out = [f"Starting at {start_label}"]
    for i in range(1, steps - 1):
        waypoint = waypoints[waypoint_index_for_step(i, steps, len(waypoints))]
        hazard, dist_km = nearest_hazard(waypoint, nearby_hazards)
        if hazard is not None and dist_km < warn_distance_km:
            out.append(hazard_warning(hazard))
        else:
            out.append(f"Passing {landmark_for_waypoint(waypoint)}")
    out.append(f"Arriving at {end_label}")
    return out
