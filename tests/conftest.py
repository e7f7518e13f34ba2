"""
Shared pytest fixtures: an in-memory SQLite database per test, seeded users,
pets and services, a recording notification publisher and an API client
wired to the test database.
"""

import os

# Must be set before petshop.config is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("NOTIFICATION_BACKEND", "log")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from petshop.auth import create_access_token  # noqa: E402
from petshop.database import Base, get_db  # noqa: E402
from petshop.domain.appointments.router import get_appointment_service  # noqa: E402
from petshop.domain.appointments.service import AppointmentService  # noqa: E402
from petshop.domain.policy import Principal  # noqa: E402
from petshop.main import app  # noqa: E402
from petshop.models import (  # noqa: E402
    Appointment,
    AppointmentStatus,
    Pet,
    Product,
    Role,
    Service,
    User,
)
from petshop.services.notification_service import NotificationPublisher  # noqa: E402


class RecordingPublisher(NotificationPublisher):
    """Keeps every published intent for assertions"""

    def __init__(self):
        self.intents = []

    def publish(self, intent):
        self.intents.append(intent)


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


def _add(session, obj):
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj


@pytest.fixture
def client_user(db_session):
    return _add(db_session, User(name="Ana Client", email="ana@example.com", role=Role.CLIENT))


@pytest.fixture
def other_client(db_session):
    return _add(db_session, User(name="Bruno Client", email="bruno@example.com", role=Role.CLIENT))


@pytest.fixture
def employee_user(db_session):
    return _add(db_session, User(name="Eva Employee", email="eva@example.com", role=Role.EMPLOYEE))


@pytest.fixture
def admin_user(db_session):
    return _add(db_session, User(name="Adam Admin", email="adam@example.com", role=Role.ADMIN))


@pytest.fixture
def pet(db_session, client_user):
    return _add(db_session, Pet(name="Rex", species="dog", breed="Beagle", owner_id=client_user.id))


@pytest.fixture
def other_pet(db_session, other_client):
    return _add(db_session, Pet(name="Mia", species="cat", owner_id=other_client.id))


@pytest.fixture
def grooming(db_session):
    return _add(db_session, Service(name="Grooming", price=80.0, duration=60))


@pytest.fixture
def bath(db_session):
    return _add(db_session, Service(name="Bath", price=45.5, duration=30))


@pytest.fixture
def make_appointment(db_session):
    """Insert an appointment directly, bypassing the booking rules"""

    def _make(pet, service, date, status=AppointmentStatus.SCHEDULED):
        return _add(
            db_session,
            Appointment(
                pet_id=pet.id,
                service_id=service.id,
                user_id=pet.owner_id,
                date=date,
                status=status,
            ),
        )

    return _make


@pytest.fixture
def make_product(db_session):
    def _make(name, price, stock):
        return _add(db_session, Product(name=name, price=price, stock=stock))

    return _make


@pytest.fixture
def slot():
    """2024-03-20T10:00:00Z stored as naive UTC"""
    return datetime(2024, 3, 20, 10, 0, 0)


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def appointment_service(db_session, publisher):
    return AppointmentService(db_session, publisher=publisher, strict_transitions=True)


@pytest.fixture
def principal_for():
    """Build the Principal a user would resolve to"""
    return lambda user: Principal(user_id=user.id, role=user.role)


@pytest.fixture
def auth_headers():
    """Bearer headers for a user id and role claim"""

    def _headers(user_id, role):
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}

    return _headers


@pytest.fixture
def api(db_session, publisher):
    """TestClient bound to the test database and recording publisher"""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_appointment_service] = lambda: AppointmentService(
        db_session, publisher=publisher, strict_transitions=True
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
