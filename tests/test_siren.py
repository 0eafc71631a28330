"""Siren status, manual toggle and the device polling endpoint."""
import pytest

from app.db.models import SirenLog

from .conftest import auth_headers, webhook_payload

DEVICE_SECRET = "device-secret"


@pytest.fixture
def device_secret(monkeypatch):
    monkeypatch.setattr("app.config.IOT_DEVICE_SECRET", DEVICE_SECRET)
    return DEVICE_SECRET


def _device_status(client, store_id, api_key=DEVICE_SECRET):
    return client.get("/api/siren/device-status", params={"storeId": store_id, "apiKey": api_key})


def test_siren_is_off_without_history(client, store, client_headers):
    resp = client.get(f"/api/siren/status/{store.id}", headers=client_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data == {"storeId": store.id, "status": False, "updatedAt": None}


def test_device_sees_siren_follow_alert_lifecycle(client, store, camera, client_headers, device_secret):
    assert _device_status(client, store.id).json()["data"]["status"] == "off"

    alert_id = client.post("/api/alerts/webhook", json=webhook_payload(camera.id)).json()["data"]["id"]
    on = _device_status(client, store.id).json()["data"]
    assert on["status"] == "on"
    assert on["updatedAt"] is not None

    client.patch(f"/api/alerts/{alert_id}/resolve", headers=client_headers)
    assert _device_status(client, store.id).json()["data"]["status"] == "off"


def test_toggle_on_then_off(client, db_session, store, client_user, client_headers, hub):
    resp = client.post("/api/siren/toggle", json={"storeId": store.id, "action": "ON"}, headers=client_headers)
    assert resp.status_code == 200
    log = resp.json()["data"]
    assert log["action"] == "ON"
    assert log["triggeredBy"] == client_user.id
    assert log["alertId"] is None

    status = client.get(f"/api/siren/status/{store.id}", headers=client_headers).json()["data"]
    assert status["status"] is True

    client.post("/api/siren/toggle", json={"storeId": store.id, "action": "OFF"}, headers=client_headers)
    status = client.get(f"/api/siren/status/{store.id}", headers=client_headers).json()["data"]
    assert status["status"] is False

    owner = f"client:{client_user.id}"
    assert [(group, event, payload["status"]) for group, event, payload in hub.emitted] == [
        (owner, "siren:status", True),
        ("admin", "siren:status", True),
        (owner, "siren:status", False),
        ("admin", "siren:status", False),
    ]
    assert db_session.query(SirenLog).count() == 2


def test_toggle_does_not_touch_alerts(client, store, camera, client_headers):
    client.post("/api/alerts/webhook", json=webhook_payload(camera.id))
    client.post("/api/siren/toggle", json={"storeId": store.id, "action": "OFF"}, headers=client_headers)

    alerts = client.get("/api/alerts/", headers=client_headers).json()["data"]
    assert [a["status"] for a in alerts] == ["ACTIVE"]
    status = client.get(f"/api/siren/status/{store.id}", headers=client_headers).json()["data"]
    assert status["status"] is False


def test_toggle_other_store_is_forbidden(client, store, other_client):
    resp = client.post(
        "/api/siren/toggle",
        json={"storeId": store.id, "action": "ON"},
        headers=auth_headers(other_client),
    )
    assert resp.status_code == 403


def test_admin_toggle_unknown_store(client, admin_headers):
    resp = client.post("/api/siren/toggle", json={"storeId": "missing", "action": "ON"}, headers=admin_headers)
    assert resp.status_code == 404


def test_toggle_rejects_unknown_action(client, store, client_headers):
    resp = client.post("/api/siren/toggle", json={"storeId": store.id, "action": "BLINK"}, headers=client_headers)
    assert resp.status_code == 400


def test_siren_logs_newest_first(client, store, client_headers, admin_headers):
    for action in ("ON", "OFF", "ON"):
        client.post("/api/siren/toggle", json={"storeId": store.id, "action": action}, headers=client_headers)

    logs = client.get(f"/api/siren/logs/{store.id}", headers=admin_headers).json()["data"]
    assert [log["action"] for log in logs] == ["ON", "OFF", "ON"]
    assert logs[0]["timestamp"] >= logs[1]["timestamp"] >= logs[2]["timestamp"]

    limited = client.get(f"/api/siren/logs/{store.id}", params={"limit": 1}, headers=admin_headers).json()["data"]
    assert len(limited) == 1


def test_siren_status_hidden_from_other_clients(client, store, other_client):
    resp = client.get(f"/api/siren/status/{store.id}", headers=auth_headers(other_client))
    assert resp.status_code == 403


def test_device_status_requires_configured_secret(client, store, monkeypatch):
    monkeypatch.setattr("app.config.IOT_DEVICE_SECRET", None)
    resp = _device_status(client, store.id, api_key="anything")
    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "IOT_SECRET_NOT_CONFIGURED"


def test_device_status_rejects_bad_key(client, store, device_secret):
    resp = _device_status(client, store.id, api_key="wrong")
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "UNAUTHORIZED"


def test_device_status_unknown_store(client, device_secret):
    resp = _device_status(client, "missing")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "STORE_NOT_FOUND"


def test_device_status_requires_parameters(client, device_secret):
    resp = client.get("/api/siren/device-status", params={"apiKey": DEVICE_SECRET})
    assert resp.status_code == 400
    assert resp.json()["error"]["details"][0]["field"] == "storeId"
