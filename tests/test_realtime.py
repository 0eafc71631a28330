"""WebSocket endpoint: handshake auth, ping and live alert events."""
import pytest
from starlette.websockets import WebSocketDisconnect

from app.routes.realtime import AUTH_FAILED

from .conftest import webhook_payload


def _token(headers):
    return headers["Authorization"].split(" ", 1)[1]


def test_connection_without_token_is_refused(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/ws"):
            pass
    assert exc.value.code == AUTH_FAILED


def test_connection_with_bad_token_is_refused(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/ws?token=garbage"):
            pass
    assert exc.value.code == AUTH_FAILED


def test_client_joins_own_group_and_answers_ping(client, client_user, client_headers, hub):
    with client.websocket_connect(f"/ws?token={_token(client_headers)}") as ws:
        hello = ws.receive_json()
        assert hello["event"] == "connected"
        assert hello["data"] == {"userId": client_user.id, "group": f"client:{client_user.id}"}
        assert hub.connection_count(f"client:{client_user.id}") == 1

        ws.send_json({"event": "ping"})
        assert ws.receive_json() == {"event": "pong", "data": None}


def test_bearer_header_is_accepted(client, admin_headers):
    with client.websocket_connect("/ws", headers=admin_headers) as ws:
        assert ws.receive_json()["data"]["group"] == "admin"


def test_client_receives_alert_and_siren_events(client, store, camera, client_headers):
    with client.websocket_connect(f"/ws?token={_token(client_headers)}") as ws:
        ws.receive_json()

        alert_id = client.post("/api/alerts/webhook", json=webhook_payload(camera.id)).json()["data"]["id"]

        new_alert = ws.receive_json()
        assert new_alert["event"] == "alert:new"
        assert new_alert["data"]["id"] == alert_id
        assert ws.receive_json() == {"event": "siren:status", "data": {"storeId": store.id, "status": True}}

        client.patch(f"/api/alerts/{alert_id}/resolve", headers=client_headers)

        assert ws.receive_json() == {"event": "alert:resolved", "data": alert_id}
        assert ws.receive_json() == {"event": "siren:status", "data": {"storeId": store.id, "status": False}}


def test_admin_receives_every_store(client, store, camera, admin_headers):
    with client.websocket_connect(f"/ws?token={_token(admin_headers)}") as ws:
        ws.receive_json()
        client.post("/api/alerts/webhook", json=webhook_payload(camera.id, "GUN"))

        event = ws.receive_json()
        assert event["event"] == "alert:new"
        assert event["data"]["detectionType"] == "GUN"
        assert event["data"]["storeId"] == store.id


def test_disconnect_unregisters(client, client_user, client_headers, hub):
    with client.websocket_connect(f"/ws?token={_token(client_headers)}") as ws:
        ws.receive_json()
    ws_group = f"client:{client_user.id}"
    assert hub.connection_count(ws_group) == 0
