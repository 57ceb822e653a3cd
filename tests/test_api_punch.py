from starlette.testclient import TestClient

from haas.api.app import app
from haas.catalog.loader import VenueRegistry
from haas.domain.models import Equipment, Venue


def _stub_registry() -> VenueRegistry:
    venues = [Venue(id="theater", name="Theater", location={"lat": 33.5904, "lon": 130.4017})]
    equipment = [Equipment(id="pa", venue_id="theater", name="PA Console", qr_code="VALID-QR-12345")]
    return VenueRegistry(venues, equipment)


def _client(monkeypatch) -> TestClient:
    # Patch the cached registry factory so API tests do not depend on data/venues.json.
    import haas.api.routes as routes

    monkeypatch.setattr(routes, "_registry", _stub_registry)
    return TestClient(app)


def test_punch_within_range_returns_attendance(monkeypatch):
    payload = {"equipment_qr": "VALID-QR-12345", "lat": 33.5922, "lon": 130.4017, "purpose": "checkin"}
    with _client(monkeypatch) as c:
        resp = c.post("/api/attendance/punch", json=payload)

    assert resp.status_code == 200
    data = resp.json()
    assert data["ok"] is True
    assert data["attendance"]["accepted"] is True
    assert data["attendance"]["equipment_id"] == "pa"
    assert data["attendance"]["venue_id"] == "theater"
    assert data["attendance"]["punched_at"]


def test_punch_out_of_range_is_400(monkeypatch):
    payload = {"equipment_qr": "VALID-QR-12345", "lat": 33.5949, "lon": 130.4017, "purpose": "checkin"}
    with _client(monkeypatch) as c:
        resp = c.post("/api/attendance/punch", json=payload)

    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["code"] == "OUT_OF_RANGE"
    assert detail["allowed_radius_m"] == 300
    assert detail["distance_m"] > 300


def test_punch_unknown_equipment_is_404(monkeypatch):
    payload = {"equipment_qr": "QR-UNKNOWN", "lat": 33.5904, "lon": 130.4017, "purpose": "checkout"}
    with _client(monkeypatch) as c:
        resp = c.post("/api/attendance/punch", json=payload)

    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "UNKNOWN_EQUIPMENT"


def test_punch_schema_violations_are_422(monkeypatch):
    bad_payloads = [
        {"equipment_qr": "", "lat": 33.5904, "lon": 130.4017, "purpose": "checkin"},
        {"equipment_qr": "VALID-QR-12345", "lat": 91, "lon": 130.4017, "purpose": "checkin"},
        {"equipment_qr": "VALID-QR-12345", "lat": 33.5904, "lon": 130.4017, "purpose": "check-in"},
        {"lat": 33.5904, "lon": 130.4017, "purpose": "checkin"},
    ]
    with _client(monkeypatch) as c:
        for payload in bad_payloads:
            assert c.post("/api/attendance/punch", json=payload).status_code == 422


def test_geofence_check_endpoint(monkeypatch):
    payload = {
        "point": {"lat": 33.59309, "lon": 130.4017},
        "center": {"lat": 33.5904, "lon": 130.4017},
        "radius_m": 300,
    }
    with _client(monkeypatch) as c:
        resp = c.post("/api/geofence/check", json=payload)

    assert resp.status_code == 200
    data = resp.json()
    assert data["within"] is True
    assert 290 < data["distance_m"] < 300
    assert data["allowed_radius_m"] == 300


def test_health_reports_status(monkeypatch):
    with _client(monkeypatch) as c:
        resp = c.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["environment"] == "development"
    assert data["uptime_seconds"] >= 0


def test_health_warns_when_registry_missing(monkeypatch, tmp_path):
    from haas.config.settings import get_settings

    monkeypatch.setenv("HAAS_VENUES_PATH", str(tmp_path / "missing.json"))
    get_settings.cache_clear()
    with _client(monkeypatch) as c:
        data = c.get("/api/health").json()
    assert data["status"] == "warning"
    assert "missing.json" in data["message"]


def test_qr_issue_json_and_png(monkeypatch):
    body = {"shift_id": "shift-1", "purpose": "checkin", "event_date": "2026-01-05"}
    with _client(monkeypatch) as c:
        resp = c.post("/api/qr/issue", json=body)
        png = c.post("/api/qr/issue?format=png", json=body)

    assert resp.status_code == 200
    data = resp.json()
    assert data["shift_id"] == "shift-1"
    assert data["issued_for_date"] == "2026-01-05"
    assert data["expires_at"].startswith("2026-01-05T23:59:59")

    assert png.status_code == 200
    assert png.headers["content-type"] == "image/png"
    assert png.content.startswith(b"\x89PNG")


def test_punch_unexpected_failure_maps_to_internal_error(monkeypatch):
    import haas.api.routes as routes

    def _broken_registry():
        raise RuntimeError("registry backend unavailable")

    monkeypatch.setattr(routes, "_registry", _broken_registry)
    payload = {"equipment_qr": "VALID-QR-12345", "lat": 33.5904, "lon": 130.4017, "purpose": "checkin"}
    with TestClient(app) as c:
        resp = c.post("/api/attendance/punch", json=payload)

    assert resp.status_code == 500
    assert resp.json()["detail"] == {"code": "INTERNAL_ERROR", "message": "registry backend unavailable"}


def test_qr_verify_accepts_issued_token_for_its_purpose(monkeypatch):
    body = {"shift_id": "shift-1", "purpose": "checkin", "event_date": "2099-01-05"}
    with _client(monkeypatch) as c:
        token = c.post("/api/qr/issue", json=body).json()
        ok = c.post("/api/qr/verify", json={"token": token, "purpose": "checkin"})
        wrong = c.post("/api/qr/verify", json={"token": token, "purpose": "checkout"})

    assert ok.status_code == 200
    assert ok.json()["valid"] is True
    assert ok.json()["expires_at"].startswith("2099-01-05T23:59:59")
    assert wrong.json()["valid"] is False


def test_qr_verify_rejects_expired_token(monkeypatch):
    body = {"shift_id": "shift-1", "purpose": "checkout", "event_date": "2000-01-05"}
    with _client(monkeypatch) as c:
        token = c.post("/api/qr/issue", json=body).json()
        resp = c.post("/api/qr/verify", json={"token": token, "purpose": "checkout"})

    assert resp.status_code == 200
    assert resp.json()["valid"] is False


def test_qr_verify_requires_timezone_aware_expiry(monkeypatch):
    token = {
        "shift_id": "shift-1",
        "token": "abc123",
        "purpose": "checkin",
        "issued_for_date": "2099-01-05",
        "expires_at": "2099-01-05T23:59:59",
    }
    with _client(monkeypatch) as c:
        resp = c.post("/api/qr/verify", json={"token": token, "purpose": "checkin"})
    assert resp.status_code == 422


def test_cors_allows_configured_frontend_origin_only(monkeypatch):
    headers = {"Access-Control-Request-Method": "POST"}
    with _client(monkeypatch) as c:
        allowed = c.options("/api/attendance/punch", headers={**headers, "Origin": "http://localhost:3000"})
        denied = c.options("/api/attendance/punch", headers={**headers, "Origin": "http://evil.example"})

    assert allowed.status_code == 200
    assert allowed.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert "access-control-allow-origin" not in denied.headers
