# path: speed-breaker-api/speedbreaker/services/route_annotator.py

from __future__ import annotations

from typing import Iterable, List, Optional
import logging
import random

from speedbreaker import config
from speedbreaker.models.hazard_models import Hazard
from speedbreaker.models.route_models import (
    BBoxWGS84,
    LatLon,
    RouteAnnotation,
    RoutePoint,
)
from speedbreaker.services.map_service import MapService
from speedbreaker.services.narration import generate_route_narration
from speedbreaker.services.proximity import find_hazards_near_route
from speedbreaker.services.waypoints import generate_waypoints
from speedbreaker.utils.geo import LatLonTuple, bbox_wgs84, bearing_deg_true, polyline_length_km

logger = logging.getLogger(__name__)


def validate_endpoints(start: RoutePoint, end: RoutePoint) -> None:
    if not start.label:
        raise ValueError("Start location is required")
    if not end.label:
        raise ValueError("End location is required")


def draw_route(
    map_service: MapService,
    start: RoutePoint,
    end: RoutePoint,
    waypoints: List[LatLonTuple],
    nearby: List[Hazard],
) -> None:
    map_service.clear()
    map_service.place_marker(start.as_tuple(), "start", popup=f"Start: {start.label}")
    map_service.place_marker(end.as_tuple(), "end", popup=f"Destination: {end.label}")
    for hazard in nearby:
        map_service.place_marker(
            hazard.point,
            "hazard",
            popup=f"Speed Breaker Alert! {hazard.location}. Severity: {hazard.severity or 'Not specified'}",
            severity=hazard.severity,
        )
    # Every other intermediate point is enough to show the path shape.
    for i, wp in enumerate(waypoints[1:-1]):
        if i % 2 == 0:
            map_service.place_marker(wp, "waypoint")
    map_service.draw_line(waypoints)
    map_service.fit_bounds(waypoints)


def annotate_route(
    start: RoutePoint,
    end: RoutePoint,
    hazards: Iterable[Hazard],
    num_points: Optional[int] = None,
    rng: Optional[random.Random] = None,
    steps: Optional[int] = None,
    near_route_km: Optional[float] = None,
    map_service: Optional[MapService] = None,
) -> RouteAnnotation:
    num_points = config.ROUTE_WAYPOINTS if num_points is None else num_points
    steps = config.NARRATION_STEPS if steps is None else steps
    near_route_km = config.NEAR_ROUTE_KM if near_route_km is None else near_route_km
    validate_endpoints(start, end)

    waypoints = generate_waypoints(start.as_tuple(), end.as_tuple(), num_points, rng=rng)
    nearby = find_hazards_near_route(waypoints, hazards, near_route_km)
    narration = generate_route_narration(waypoints, nearby, start.label, end.label, steps=steps, warn_distance_km=near_route_km)

    logger.info(
        "Route %s -> %s: %d waypoints, %d hazard(s) within %.0f m",
        start.label, end.label, len(waypoints), len(nearby), near_route_km * 1000,
    )

    layer = {}
    if map_service is not None:
        draw_route(map_service, start, end, waypoints, nearby)
        to_geojson = getattr(map_service, "to_geojson", None)
        if callable(to_geojson):
            layer = to_geojson()

    return RouteAnnotation(
        start_label=start.label,
        end_label=end.label,
        waypoints=[LatLon(lat=lat, lon=lon) for lat, lon in waypoints],
        nearby_hazards=nearby,
        narration=narration,
        total_distance_km=polyline_length_km(waypoints),
        heading_deg_true=bearing_deg_true(waypoints[0], waypoints[-1]),
        bbox_wgs84=BBoxWGS84(**bbox_wgs84(waypoints)),
        map_layer=layer,
    )
