# path: speed-breaker-api/speedbreaker/services/waypoints.py

from __future__ import annotations

from typing import List, Optional
import math
import random

from speedbreaker.utils.geo import LatLonTuple

# Lateral jitter, as a fraction of the straight-line length.
LATERAL_JITTER = 0.005


def generate_waypoints(
    start: LatLonTuple,
    end: LatLonTuple,
    num_points: int = 8,
    rng: Optional[random.Random] = None,
) -> List[LatLonTuple]:
    """
    Cosmetic path from start to end: num_points + 2 points.

    Intermediate point i sits at fraction i / (num_points + 1) of the straight
    line, pushed sideways by a small random offset so the drawn path is not a
    ruler line. This is NOT a drivable route.
    """
    if num_points < 0:
        raise ValueError(f"num_points must be >= 0, got {num_points}")
    rng = rng or random.Random()

    start = (float(start[0]), float(start[1]))
    end = (float(end[0]), float(end[1]))

    d_lat = end[0] - start[0]
    d_lon = end[1] - start[1]
    distance = math.hypot(d_lat, d_lon)
    angle = math.atan2(d_lon, d_lat)

    points = [start]
    for i in range(1, num_points + 1):
        ratio = i / (num_points + 1)
        along = ratio * distance
        perp = (rng.random() - 0.5) * LATERAL_JITTER * distance

        lat = start[0] + along * math.cos(angle) + perp * math.sin(angle)
        lon = start[1] + along * math.sin(angle) - perp * math.cos(angle)
        points.append((lat, lon))

    points.append(end)
    return points
