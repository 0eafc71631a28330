"""Stream sessions handed to the dashboard player."""
from .conftest import auth_headers


def test_stream_session_registers_and_returns_urls(client, camera, client_headers, streams):
    resp = client.get(f"/api/stream/{camera.id}", headers=client_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["cameraId"] == camera.id
    assert data["streamId"] == camera.id
    assert data["ready"] is True
    assert data["urls"]["hls"] == f"http://go2rtc.test:1984/api/stream.m3u8?src={camera.id}"
    assert data["urls"]["rtsp"] == f"rtsp://go2rtc.test:8554/{camera.id}"
    assert streams.streams[camera.id] == camera.stream_url


def test_already_registered_stream_is_reused(client, camera, client_headers, streams):
    streams.streams[camera.id] = "rtsp://already/there"
    client.get(f"/api/stream/{camera.id}", headers=client_headers)
    assert streams.streams[camera.id] == "rtsp://already/there"


def test_stream_not_ready_yet(client, camera, client_headers, streams):
    streams.ready = False
    resp = client.get(f"/api/stream/{camera.id}", headers=client_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["ready"] is False


def test_stream_server_down(client, camera, client_headers, streams):
    streams.available = False
    resp = client.get(f"/api/stream/{camera.id}", headers=client_headers)
    assert resp.status_code == 502
    assert resp.json()["error"]["code"] == "STREAM_SERVER_UNAVAILABLE"


def test_stream_hidden_from_other_clients(client, camera, other_client):
    resp = client.get(f"/api/stream/{camera.id}", headers=auth_headers(other_client))
    assert resp.status_code == 403


def test_stream_token_validates_for_its_camera_only(client, camera, store, client_headers):
    token = client.get(f"/api/stream/{camera.id}", headers=client_headers).json()["data"]["token"]

    ok = client.get(f"/api/stream/{camera.id}/validate", params={"token": token})
    assert ok.status_code == 200
    assert ok.json()["data"] == {"valid": True, "cameraId": camera.id, "storeId": store.id}

    wrong = client.get("/api/stream/another-camera/validate", params={"token": token})
    assert wrong.status_code == 401


def test_access_token_is_not_a_stream_token(client, camera, client_headers):
    access_token = client_headers["Authorization"].split(" ", 1)[1]
    resp = client.get(f"/api/stream/{camera.id}/validate", params={"token": access_token})
    assert resp.status_code == 401
