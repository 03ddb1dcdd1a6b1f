import random

import pytest

from speedbreaker.models.hazard_models import Hazard
from speedbreaker.services.narration import (
    LANDMARKS,
    generate_route_narration,
    landmark_for_waypoint,
)
from speedbreaker.services.proximity import find_hazards_near_route, hazard_on_segment, nearest_hazard
from speedbreaker.services.waypoints import generate_waypoints

START = (20.9467, 72.9520)
END = (20.9500, 72.9550)


def make_hazard(hid, lat, lon, **kw):
    return Hazard(id=hid, location=kw.pop("location", f"Spot {hid}"), latitude=lat, longitude=lon,
                  status="approved", **kw)


@pytest.mark.parametrize("n", [0, 1, 8, 12])
def test_generate_waypoints_count_and_endpoints(n):
    pts = generate_waypoints(START, END, n, rng=random.Random(1))
    assert len(pts) == n + 2
    assert pts[0] == START
    assert pts[-1] == END


def test_generate_waypoints_stays_close_to_line():
    pts = generate_waypoints((0.0, 0.0), (1.0, 0.0), 9, rng=random.Random(7))
    for i, (lat, lon) in enumerate(pts[1:-1], start=1):
        assert lat == pytest.approx(i / 10, abs=1e-9)
        assert abs(lon) <= 0.0025 + 1e-12


def test_generate_waypoints_seeded_is_reproducible():
    a = generate_waypoints(START, END, 12, rng=random.Random(42))
    b = generate_waypoints(START, END, 12, rng=random.Random(42))
    assert a == b


def test_generate_waypoints_rejects_negative_count():
    with pytest.raises(ValueError):
        generate_waypoints(START, END, -1)


def test_hazard_near_route_scenario():
    hazard = make_hazard("sb-x", 20.9480, 72.9535, severity="high")
    waypoints = generate_waypoints(START, END, 12, rng=random.Random(3))
    assert find_hazards_near_route(waypoints, [hazard], 0.2) == [hazard]


def test_find_hazards_no_duplicates_and_skips_nan():
    waypoints = [(20.0, 72.0), (20.001, 72.001), (20.002, 72.002)]
    on_shared_vertex = make_hazard("a", 20.001, 72.001)
    broken = make_hazard("b", "not-a-number", 72.001)
    far = make_hazard("c", 21.0, 73.0)
    also_near = make_hazard("d", 20.0, 72.0)

    out = find_hazards_near_route(waypoints, [on_shared_vertex, broken, far, also_near])
    assert [h.id for h in out] == ["a", "d"]


def test_find_hazards_needs_a_segment():
    assert find_hazards_near_route([(20.0, 72.0)], [make_hazard("a", 20.0, 72.0)]) == []


def test_nearest_and_segment_hazard():
    near = make_hazard("near", 20.0005, 72.0)
    far = make_hazard("far", 20.01, 72.0)
    hazard, dist = nearest_hazard((20.0, 72.0), [far, near])
    assert hazard is near
    assert dist < 0.1
    assert hazard_on_segment((20.0, 72.0), (20.0, 72.001), [far, near], 0.1) is near
    assert hazard_on_segment((20.0, 72.0), (20.0, 72.001), [far], 0.1) is None


def test_landmark_is_deterministic():
    assert landmark_for_waypoint(START) == "Tech Park"
    assert landmark_for_waypoint(START) == landmark_for_waypoint(START)
    assert landmark_for_waypoint((-33.8688, -151.2093)) in LANDMARKS


def test_narration_without_hazards():
    waypoints = generate_waypoints(START, END, 12, rng=random.Random(5))
    narration = generate_route_narration(waypoints, [], "A", "B")
    assert len(narration) == 20
    assert narration[0] == "Starting at A"
    assert narration[-1] == "Arriving at B"
    assert all(step.startswith("Passing ") for step in narration[1:-1])
    assert narration == generate_route_narration(waypoints, [], "A", "B")


def test_narration_warns_near_hazard():
    waypoints = generate_waypoints(START, END, 12, rng=random.Random(5))
    hazard = make_hazard("sb-x", 20.9480, 72.9535, severity="high", location="Dudhia Talav")
    narration = generate_route_narration(waypoints, [hazard], "A", "B")
    assert "Speed breaker ahead: Dudhia Talav (high severity)" in narration


def test_narration_with_no_waypoints_is_blank():
    assert generate_route_narration([], [], "A", "B") == [""] * 20
