# path: speed-breaker-api/speedbreaker/models/route_models.py

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator

from speedbreaker.models.hazard_models import Hazard


NavigationState = Literal["idle", "navigating"]


class LatLon(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lon: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lon)


class RoutePoint(LatLon):
    # Already geocoded by the caller; this service never resolves addresses.
    label: str = Field(max_length=120)

    @field_validator("label")
    @classmethod
    def strip_label(cls, v: str) -> str:
        return v.strip()


class RouteRequest(BaseModel):
    start: RoutePoint
    end: RoutePoint
    # None: use the configured ROUTE_WAYPOINTS.
    num_points: Optional[int] = Field(default=None, ge=0, le=200)
    seed: Optional[int] = None


class BBoxWGS84(BaseModel):
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float


class RouteAnnotation(BaseModel):
    start_label: str
    end_label: str
    # Simulated path: interpolated, not road-snapped.
    waypoints: List[LatLon]
    nearby_hazards: List[Hazard]
    narration: List[str]
    total_distance_km: float = Field(ge=0)
    heading_deg_true: float = Field(ge=0, lt=360)
    bbox_wgs84: BBoxWGS84
    map_layer: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_waypoints(self):
        if len(self.waypoints) < 2:
            raise ValueError("Route annotation must have at least 2 waypoints")
        return self


class NavigationStatus(BaseModel):
    state: NavigationState = "idle"
    position: int = Field(default=0, ge=0)
    step_count: int = Field(default=0, ge=0)
    current_step: Optional[str] = None
    active_alert: Optional[Hazard] = None
    start_label: Optional[str] = None
    end_label: Optional[str] = None
