from datetime import date

import pytest
from fastapi.testclient import TestClient
from werkzeug.security import generate_password_hash

from app.core.config import Settings
from app.main import create_app
from app.models.db_models import Admin, Booking
from app.services.db_service import Database

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'bookings_test.db'}",
        DB_POOL_SIZE=5,
        SMTP_USERNAME="staff@example.com",
        SMTP_PASSWORD="",
        LOG_DIR=str(tmp_path / "logs"),
        ENVIRONMENT="test",
    )


@pytest.fixture
def db(test_settings):
    database = Database(test_settings.DATABASE_URL, pool_size=test_settings.DB_POOL_SIZE)
    database.create_tables()
    yield database
    database.dispose()


@pytest.fixture
def admin(db):
    with db.session() as session:
        account = Admin(username=ADMIN_USERNAME, password_hash=generate_password_hash(ADMIN_PASSWORD))
        session.add(account)
        session.commit()
    return account


@pytest.fixture
def make_booking(db):
    """Inserts a booking row directly, bypassing create-time validation."""
    def _make(**overrides):
        fields = {
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane@example.com",
            "phone_number": "555-0100",
            "address": "1 Main St",
            "service_type": "Deep Cleaning",
            "message": None,
            "booking_date": date(2024, 6, 1),
            "status": None,
        }
        fields.update(overrides)
        with db.session() as session:
            booking = Booking(**fields)
            session.add(booking)
            session.commit()
        return booking
    return _make


@pytest.fixture
def client(test_settings, db, admin):
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    response = client.post("/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def credentials(admin):
    return ADMIN_USERNAME, ADMIN_PASSWORD
