# path: speed-breaker-api/speedbreaker/services/map_service.py

from __future__ import annotations

from typing import Any, Callable, Dict, List, Literal, Optional, Protocol, Sequence

from speedbreaker.utils.geo import LatLonTuple, bbox_wgs84

MarkerKind = Literal["start", "end", "hazard", "waypoint"]
ClickHandler = Callable[[float, float], None]

SEVERITY_COLORS = {
    "low": "#4ade80",
    "medium": "#facc15",
    "high": "#ef4444",
}
MARKER_COLORS = {
    "start": "#22c55e",
    "end": "#ef4444",
    "waypoint": "#3b82f6",
}
ROUTE_STYLE = {"color": "#3b82f6", "weight": 6, "opacity": 0.8}


class MapService(Protocol):
    """What the navigation layer needs from a map, whichever library draws it."""

    def place_marker(self, point: LatLonTuple, kind: MarkerKind, popup: str = "", severity: Optional[str] = None) -> None: ...

    def draw_line(self, points: Sequence[LatLonTuple], style: Optional[Dict[str, Any]] = None) -> None: ...

    def fit_bounds(self, points: Sequence[LatLonTuple]) -> None: ...

    def on_click(self, handler: ClickHandler) -> None: ...

    def clear(self) -> None: ...


class GeoJSONMapAdapter:
    """
    MapService that records layers as a GeoJSON FeatureCollection.

    Coordinates go out in GeoJSON (lon, lat) order; the client map library
    renders the collection as-is.
    """

    def __init__(self) -> None:
        self._features: List[Dict[str, Any]] = []
        self._bbox: Optional[Dict[str, float]] = None
        self._click_handlers: List[ClickHandler] = []

    def place_marker(self, point: LatLonTuple, kind: MarkerKind, popup: str = "", severity: Optional[str] = None) -> None:
        if kind == "hazard":
            color = SEVERITY_COLORS.get(severity or "", "#9ca3af")
        else:
            color = MARKER_COLORS[kind]
        self._features.append(
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [point[1], point[0]]},
                "properties": {"kind": kind, "popup": popup, "color": color, "severity": severity},
            }
        )

    def draw_line(self, points: Sequence[LatLonTuple], style: Optional[Dict[str, Any]] = None) -> None:
        if len(points) < 2:
            raise ValueError("A line needs at least 2 points")
        self._features.append(
            {
                "type": "Feature",
                "geometry": {"type": "LineString", "coordinates": [[p[1], p[0]] for p in points]},
                "properties": {"kind": "route", **(style or ROUTE_STYLE)},
            }
        )

    def fit_bounds(self, points: Sequence[LatLonTuple]) -> None:
        self._bbox = bbox_wgs84(points)

    def on_click(self, handler: ClickHandler) -> None:
        self._click_handlers.append(handler)

    def click(self, lat: float, lon: float) -> None:
        for handler in list(self._click_handlers):
            handler(lat, lon)

    def clear(self) -> None:
        self._features = []
        self._bbox = None

    def to_geojson(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": "FeatureCollection", "features": list(self._features)}
        if self._bbox is not None:
            b = self._bbox
            out["bbox"] = [b["min_lon"], b["min_lat"], b["max_lon"], b["max_lat"]]
        return out
