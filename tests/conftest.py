"""Test fixtures for the Store Guard API tests."""
import os
from typing import Any, Dict, List, Optional

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "production")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import create_access_token, hash_password
from app.database import Base, get_db
from app.db.models import Camera, CameraStatus, Store, User, UserRole
from app.dependencies import get_hub, get_notifier, get_stream_client
from app.realtime.hub import ConnectionHub
from app.services.go2rtc import Go2RTCClient

PASSWORD = "testpass"
# Hashing is slow on purpose; hash once per session
_PASSWORD_HASH = hash_password(PASSWORD)


class RecordingNotifier:
    """Notification gateway double that records calls; optionally fails."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[Dict[str, Any]] = []

    async def send_alert_notification(self, police_number, store_name, address, detection_type, image_url=None):
        self.calls.append({
            "police_number": police_number,
            "store_name": store_name,
            "address": address,
            "detection_type": detection_type,
            "image_url": image_url,
        })
        if self.fail:
            raise RuntimeError("gateway down")
        return True


class RecordingHub(ConnectionHub):
    """Real hub that also keeps a log of (group, event, payload) emits."""

    def __init__(self):
        super().__init__()
        self.emitted: List[tuple] = []

    async def emit(self, group: str, event: str, payload: Any) -> int:
        self.emitted.append((group, event, payload))
        return await super().emit(group, event, payload)

    def events_for(self, group: str) -> List[str]:
        return [event for g, event, _ in self.emitted if g == group]


class FakeStreams(Go2RTCClient):
    """go2rtc double: URL generation is real, network calls are recorded."""

    def __init__(self, available: bool = True, fail_register: bool = False, ready: bool = True):
        super().__init__(base_url="http://go2rtc.test:1984", rtsp_url="rtsp://go2rtc.test:8554")
        self.available = available
        self.fail_register = fail_register
        self.ready = ready
        self.streams: Dict[str, str] = {}
        self.removed: List[str] = []

    async def add_stream(self, stream_id: str, source_url: str) -> None:
        if self.fail_register:
            from app.errors import ExternalServiceFailure
            raise ExternalServiceFailure("go2rtc stream registration failed", code="STREAM_REGISTRATION_FAILED")
        self.streams[stream_id] = source_url

    async def remove_stream(self, stream_id: str) -> bool:
        self.removed.append(stream_id)
        self.streams.pop(stream_id, None)
        return True

    async def get_stream_info(self, stream_id: str) -> Optional[Dict]:
        if stream_id in self.streams and self.ready:
            return {"producers": [{"url": self.streams[stream_id], "state": "connected"}]}
        return None

    async def is_available(self) -> bool:
        return self.available

    async def wait_for_stream_ready(self, stream_id, timeout=None, interval=0.5) -> bool:
        return self.is_ready(await self.get_stream_info(stream_id))


@pytest.fixture
def db_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def TestingSessionLocal(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(TestingSessionLocal):
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def hub():
    return RecordingHub()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def streams():
    return FakeStreams()


@pytest.fixture
def app(TestingSessionLocal, hub, notifier, streams):
    """FastAPI app with database, hub, notifier and go2rtc overridden."""
    from app.main import app as fastapi_app

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_hub] = lambda: hub
    fastapi_app.dependency_overrides[get_notifier] = lambda: notifier
    fastapi_app.dependency_overrides[get_stream_client] = lambda: streams
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def make_user(db, email: str, phone: str, role: UserRole = UserRole.CLIENT) -> User:
    user = User(email=email, phone=phone, password_hash=_PASSWORD_HASH, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_store(db, user: User, name: str = "Corner Jewellers") -> Store:
    store = Store(
        user_id=user.id,
        name=name,
        address="12 High Street, Springfield",
        latitude=51.5,
        longitude=-0.12,
        police_number="+15550100",
    )
    db.add(store)
    db.commit()
    db.refresh(store)
    return store


def make_camera(db, store: Store, url: str = "rtsp://10.0.0.5:554/stream1", position: int = 0) -> Camera:
    camera = Camera(store_id=store.id, ip_address=url, stream_url=url, position=position, status=CameraStatus.ACTIVE)
    db.add(camera)
    db.commit()
    db.refresh(camera)
    return camera


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def admin_user(db_session):
    return make_user(db_session, "admin@storeguard.test", "+15550001", UserRole.ADMIN)


@pytest.fixture
def client_user(db_session):
    return make_user(db_session, "owner@storeguard.test", "+15550002")


@pytest.fixture
def other_client(db_session):
    return make_user(db_session, "other@storeguard.test", "+15550003")


@pytest.fixture
def store(db_session, client_user):
    return make_store(db_session, client_user)


@pytest.fixture
def camera(db_session, store):
    return make_camera(db_session, store)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def client_headers(client_user):
    return auth_headers(client_user)


def webhook_payload(camera_id: str, detection_type: str = "HELMET", **overrides) -> Dict[str, Any]:
    payload = {
        "cameraId": camera_id,
        "detectionType": detection_type,
        "confidence": 0.93,
        "imageUrl": "https://detections.example.com/frames/abc123.jpg",
        "timestamp": "2026-10-19T08:15:00Z",
        "signature": "unsigned",
    }
    payload.update(overrides)
    return payload
