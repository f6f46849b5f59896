import os
import tempfile
from datetime import date, datetime, time
from types import SimpleNamespace

# Point the app at a throwaway SQLite file before timebook is imported
_db_dir = tempfile.mkdtemp(prefix="timebook-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from timebook.auth import Identity  # noqa: E402
from timebook.database import Base, SessionLocal, engine  # noqa: E402
from timebook.main import app  # noqa: E402
from timebook.models import (  # noqa: E402
    STATUS_PENDING,
    Appointment,
    MasterProfile,
    Service,
    ServiceOption,
    TimeSlot,
)
from timebook.rate_limiter import booking_rate_limit  # noqa: E402

DAY = date(2030, 1, 15)


def at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    return datetime.combine(day, time(hour, minute))


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog(db):
    """Two masters; the first has a simple 60-minute service and a service with options"""
    master = MasterProfile(user_id=100, specialty="Hair")
    other_master = MasterProfile(user_id=200, specialty="Nails")
    db.add_all([master, other_master])
    db.flush()

    haircut = Service(master_id=master.id, name="Haircut", duration_minutes=60, price=30.0)
    coloring = Service(master_id=master.id, name="Coloring", duration_minutes=0, price=0)
    manicure = Service(master_id=other_master.id, name="Manicure", duration_minutes=45, price=20.0)
    db.add_all([haircut, coloring, manicure])
    db.flush()

    short = ServiceOption(service_id=coloring.id, name="Roots", duration_minutes=30, price=25.0)
    long = ServiceOption(service_id=coloring.id, name="Full", duration_minutes=60, price=50.0)
    db.add_all([short, long])
    db.commit()

    return SimpleNamespace(
        master_id=master.id,
        other_master_id=other_master.id,
        haircut_id=haircut.id,
        coloring_id=coloring.id,
        manicure_id=manicure.id,
        short_option_id=short.id,
        long_option_id=long.id,
    )


@pytest.fixture
def people():
    return SimpleNamespace(
        client=Identity(user_id=1, role="user"),
        other_client=Identity(user_id=2, role="user"),
        master=Identity(user_id=100, role="master"),
        other_master=Identity(user_id=200, role="master"),
        admin=Identity(user_id=900, role="admin"),
    )


@pytest.fixture
def make_slot(db):
    def _make(master_id, service_id, start, end, is_booked=False):
        slot = TimeSlot(
            master_id=master_id,
            service_id=service_id,
            start_time=start,
            end_time=end,
            is_booked=is_booked,
        )
        db.add(slot)
        db.commit()
        return slot

    return _make


@pytest.fixture
def make_appointment(db):
    def _make(master_id, service_id, start, end, status=STATUS_PENDING, user_id=1):
        appointment = Appointment(
            user_id=user_id,
            master_id=master_id,
            service_id=service_id,
            start_time=start,
            end_time=end,
            status=status,
        )
        db.add(appointment)
        db.commit()
        return appointment

    return _make


@pytest.fixture
def client(db):
    app.dependency_overrides[booking_rate_limit] = lambda: None
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def headers_for(identity: Identity) -> dict:
    return {"X-User-Id": str(identity.user_id), "X-User-Role": identity.role}
