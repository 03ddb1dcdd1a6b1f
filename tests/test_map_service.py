import pytest

from speedbreaker.services.map_service import GeoJSONMapAdapter, SEVERITY_COLORS


def test_markers_and_line_use_lon_lat_order():
    m = GeoJSONMapAdapter()
    m.place_marker((20.9467, 72.952), "start", popup="Start")
    m.place_marker((20.948, 72.953), "hazard", severity="medium")
    m.draw_line([(20.9467, 72.952), (20.95, 72.955)])
    m.fit_bounds([(20.9467, 72.952), (20.95, 72.955)])

    layer = m.to_geojson()
    start, hazard, line = layer["features"]
    assert start["geometry"]["coordinates"] == [72.952, 20.9467]
    assert hazard["properties"]["color"] == SEVERITY_COLORS["medium"]
    assert line["geometry"]["coordinates"][-1] == [72.955, 20.95]
    assert layer["bbox"] == [72.952, 20.9467, 72.955, 20.95]


def test_unknown_severity_marker_is_grey():
    m = GeoJSONMapAdapter()
    m.place_marker((20.9, 72.9), "hazard")
    assert m.to_geojson()["features"][0]["properties"]["color"] == "#9ca3af"


def test_line_needs_two_points():
    with pytest.raises(ValueError):
        GeoJSONMapAdapter().draw_line([(20.9, 72.9)])


def test_click_dispatches_and_clear_keeps_handlers():
    m = GeoJSONMapAdapter()
    clicks = []
    m.on_click(lambda lat, lon: clicks.append((lat, lon)))
    m.place_marker((20.9, 72.9), "end")
    m.clear()
    m.click(20.95, 72.95)
    assert clicks == [(20.95, 72.95)]
    assert m.to_geojson() == {"type": "FeatureCollection", "features": []}
