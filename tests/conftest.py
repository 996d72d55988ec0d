from datetime import datetime, timedelta, timezone

import httpx
import pytest

from quickfix.admins import AdminStore
from quickfix.config import Settings
from quickfix.db import init_models
from quickfix.main import create_app
from quickfix.notifications import BookingNotifications

ADMIN_PASSWORD = "s3cret-pass"


class RecordingSink:
    name = "recording"

    def __init__(self):
        self.created = []
        self.status_changes = []

    async def booking_created(self, booking):
        self.created.append(booking)

    async def status_changed(self, booking, old_status):
        self.status_changes.append((booking, old_status))


class FailingSink:
    name = "failing"

    def __init__(self):
        self.calls = 0

    async def booking_created(self, booking):
        self.calls += 1
        raise RuntimeError("smtp down")

    async def status_changed(self, booking, old_status):
        self.calls += 1
        raise RuntimeError("smtp down")


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "ENVIRONMENT": "test",
        "DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        "JWT_SECRET": "test-secret",
        "AUTO_CREATE_TABLES": False,
        "REDIS_URL": "",
        "RABBIT_URL": "",
        "SMTP_HOST": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def booking_payload(**overrides) -> dict:
    tomorrow = datetime.now(timezone.utc) + timedelta(days=1)
    payload = {
        "customerName": "Jane Doe",
        "email": "JANE@X.COM",
        "phone": "+15551234567",
        "address": {"street": "1 Main St", "city": "Metropolis", "state": "NY", "zipCode": "10001"},
        "serviceType": "plumbing",
        "serviceDescription": "Leaking kitchen sink under cabinet",
        "preferredDate": tomorrow.isoformat(),
        "preferredTime": "morning",
        "urgency": "medium",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def settings_overrides():
    return {}


@pytest.fixture
def settings(tmp_path, settings_overrides):
    return make_settings(tmp_path, **settings_overrides)


@pytest.fixture
def recorder():
    return RecordingSink()


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture
def sinks(recorder):
    return [recorder]


@pytest.fixture
async def app(settings, sinks):
    app = create_app(settings, notifications=BookingNotifications(sinks))
    await init_models(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def db(app):
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture
async def admin(db):
    return await AdminStore(db).create(
        username="admin",
        email="admin@quickfix.com",
        password=ADMIN_PASSWORD,
    )


@pytest.fixture
def auth_headers(app, admin):
    token = app.state.tokens.issue(admin)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def create_booking(client):
    async def _create(**overrides) -> dict:
        res = await client.post("/bookings", json=booking_payload(**overrides))
        assert res.status_code == 201, res.text
        return res.json()["data"]

    return _create
