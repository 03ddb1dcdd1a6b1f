import pytest
from fastapi.testclient import TestClient

from speedbreaker import config
from speedbreaker.main import app

ROUTE = {
    "start": {"label": "Navsari Railway Station", "lat": 20.9467, "lon": 72.9520},
    "end": {"label": "Abrama Road", "lat": 20.9500, "lon": 72.9550},
    "seed": 7,
}


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def test_list_approved(client):
    resp = client.get("/hazards")
    assert resp.status_code == 200
    assert len(resp.json()) == 5

    high = client.get("/hazards", params={"severity": "high"}).json()
    assert {h["id"] for h in high} == {"sb-1", "sb-5"}


def test_report_validation(client):
    bad = {"location": "Nowhere", "latitude": 95, "longitude": 72.9, "reported_by": "user-1"}
    assert client.post("/hazards", json=bad).status_code == 422


def test_report_approve_flow(client):
    payload = {"location": "Station Road", "latitude": 20.95, "longitude": 72.95,
               "reported_by": "user-1", "severity": "weird"}
    created = client.post("/hazards", json=payload)
    assert created.status_code == 201
    body = created.json()
    assert body["status"] == "pending"
    assert body["severity"] is None

    approved = client.post(f"/hazards/{body['id']}/approve")
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"
    assert client.get(f"/hazards/{body['id']}").json()["status"] == "approved"


def test_unknown_hazard_is_404(client):
    assert client.post("/hazards/does-not-exist/approve").status_code == 404
    assert client.delete("/hazards/does-not-exist").status_code == 404
    assert client.get("/hazards/does-not-exist").status_code == 404


def test_edit_and_delete(client):
    resp = client.patch("/hazards/sb-3", json={"description": "Patched up"})
    assert resp.status_code == 200
    assert resp.json()["description"] == "Patched up"
    assert client.delete("/hazards/sb-3").status_code == 204


def test_analytics_and_alert_settings(client):
    stats = client.get("/hazards/analytics").json()
    assert stats["pending_reports"] >= 0
    resp = client.patch("/hazards/alert-settings/user-5", json={"notify_nearby": False})
    assert resp.status_code == 200
    assert resp.json()["notify_nearby"] is False
    assert client.get("/hazards/alert-settings/user-5").json()["notify_nearby"] is False


def test_route_preview(client):
    resp = client.post("/navigation/route", json=ROUTE)
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["waypoints"]) == 14
    assert body["narration"][0] == "Starting at Navsari Railway Station"
    assert body["narration"][-1] == "Arriving at Abrama Road"
    assert len(body["narration"]) == 20
    assert "sb-1" in [h["id"] for h in body["nearby_hazards"]]
    assert body["map_layer"]["type"] == "FeatureCollection"
    assert client.get("/navigation/status").json()["state"] == "idle"


def test_start_requires_labels(client):
    blank = {**ROUTE, "end": {**ROUTE["end"], "label": " "}}
    resp = client.post("/navigation/start", json=blank)
    assert resp.status_code == 400
    assert client.get("/navigation/status").json()["state"] == "idle"


def test_start_and_stop(client):
    resp = client.post("/navigation/start", json=ROUTE)
    assert resp.status_code == 200
    assert resp.json()["status"]["state"] == "navigating"
    assert client.get("/navigation/status").json()["state"] == "navigating"

    stopped = client.post("/navigation/stop")
    assert stopped.status_code == 200
    assert stopped.json()["state"] == "idle"
    assert stopped.json()["active_alert"] is None


def test_patch_null_location_is_rejected(client):
    resp = client.patch("/hazards/sb-1", json={"location": None})
    assert resp.status_code == 422
    hazard = client.get("/hazards/sb-1").json()
    assert hazard["location"] == "Navsari Railway Station"
    assert "sb-1" in [h["id"] for h in client.get("/hazards").json()]


def test_preview_and_start_follow_config(monkeypatch):
    monkeypatch.setattr(config, "NARRATION_STEPS", 10)
    monkeypatch.setattr(config, "ROUTE_WAYPOINTS", 5)
    # Tighter radius than the default; preview and playback must pick the same hazards.
    monkeypatch.setattr(config, "NEAR_ROUTE_KM", 0.05)
    with TestClient(app) as c:
        preview = c.post("/navigation/route", json={"start": ROUTE["start"], "end": ROUTE["end"]}).json()
        started = c.post("/navigation/start", json={"start": ROUTE["start"], "end": ROUTE["end"]}).json()
        c.post("/navigation/stop")

    annotation = started["annotation"]
    assert len(preview["narration"]) == len(annotation["narration"]) == 10
    assert len(preview["waypoints"]) == len(annotation["waypoints"]) == 7
    assert [h["id"] for h in preview["nearby_hazards"]] == [h["id"] for h in annotation["nearby_hazards"]]
    assert started["status"]["step_count"] == 10


def test_start_honours_num_points_and_seed(client):
    body = {**ROUTE, "num_points": 4}
    preview = client.post("/navigation/route", json=body).json()
    started = client.post("/navigation/start", json=body).json()
    client.post("/navigation/stop")
    assert len(started["annotation"]["waypoints"]) == 6
    assert started["annotation"]["waypoints"] == preview["waypoints"]
