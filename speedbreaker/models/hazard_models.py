# path: speed-breaker-api/speedbreaker/models/hazard_models.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional
import math

from pydantic import BaseModel, Field, field_validator

from speedbreaker.utils.geo import is_valid_point


Severity = Literal["low", "medium", "high"]
HazardStatus = Literal["pending", "approved", "rejected"]

SEVERITIES = ("low", "medium", "high")


def normalize_severity(value: Any) -> Optional[str]:
    # Unknown severities are "unspecified", never a guessed default.
    if isinstance(value, str) and value.strip().lower() in SEVERITIES:
        return value.strip().lower()
    return None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Hazard(BaseModel):
    """A stored speed breaker / pothole record.

    Stored records are read leniently: bad coordinates become NaN so the
    geometry layer can skip them, and unknown severities become None.
    """

    id: str
    location: str = ""
    latitude: float = math.nan
    longitude: float = math.nan
    description: str = ""
    severity: Optional[Severity] = None
    status: HazardStatus = "pending"
    reported_by: str = ""
    reported_at: datetime = Field(default_factory=utc_now)
    image: Optional[str] = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def coerce_coordinate(cls, v: Any):
        if isinstance(v, bool):
            return math.nan
        try:
            return float(v)
        except (TypeError, ValueError):
            return math.nan

    @field_validator("severity", mode="before")
    @classmethod
    def coerce_severity(cls, v: Any):
        return normalize_severity(v)

    @property
    def point(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)

    @property
    def has_valid_coordinates(self) -> bool:
        return is_valid_point(self.point)


class HazardCreate(BaseModel):
    location: str = Field(min_length=1, max_length=200)
    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)
    description: str = ""
    severity: Optional[Severity] = None
    reported_by: str = Field(min_length=1)
    image: Optional[str] = None

    @field_validator("severity", mode="before")
    @classmethod
    def coerce_severity(cls, v: Any):
        return normalize_severity(v)


class HazardUpdate(BaseModel):
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    latitude: Optional[float] = Field(default=None, ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: Optional[float] = Field(default=None, ge=-180.0, le=180.0, allow_inf_nan=False)
    description: Optional[str] = None
    severity: Optional[Severity] = None
    image: Optional[str] = None

    @field_validator("location", "latitude", "longitude", "description", mode="before")
    @classmethod
    def reject_null(cls, v: Any):
        # Omit a field to leave it unchanged; only severity and image may be cleared.
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @field_validator("severity", mode="before")
    @classmethod
    def coerce_severity(cls, v: Any):
        if v is None:
            return None
        return normalize_severity(v)


class AlertSettings(BaseModel):
    user_id: str
    notify_new_breakers: bool = True
    notify_nearby: bool = True
    distance_threshold_m: float = Field(default=1000.0, gt=0)
    email_notifications: bool = True
    push_notifications: bool = False


class AlertSettingsUpdate(BaseModel):
    notify_new_breakers: Optional[bool] = None
    notify_nearby: Optional[bool] = None
    distance_threshold_m: Optional[float] = Field(default=None, gt=0)
    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None


class Analytics(BaseModel):
    approved_breakers: int = Field(ge=0)
    pending_reports: int = Field(ge=0)
    recent_reports: int = Field(ge=0)
