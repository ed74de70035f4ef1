"""Shared fixtures: a file-backed SQLite database per test, a scripted gateway, sample people."""

import sys
import os
import tempfile
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "vehicle_permits_test_logs"))
os.environ.setdefault("SIMULATED_LATENCY_SECONDS", "0")

import time
import pytest
from datetime import timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from vehicle_permits.database import create_tables, get_db
from vehicle_permits.models.employee import Employee
from vehicle_permits.models.hr_user import HrUser
from vehicle_permits.services.notification_gateway import DeliveryResult, get_gateway
from vehicle_permits.utils.timeutil import utcnow


class StubGateway:
    """Deterministic gateway: returns queued outcomes in order, then succeeds."""

    name = "stub"

    def __init__(self, outcomes=None, delay=0.0, error=None):
        self.outcomes = list(outcomes or [])
        self.delay = delay
        self.error = error
        self.calls = []

    def send(self, recipient, message):
        self.calls.append((recipient, message))
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        if self.outcomes:
            return self.outcomes.pop(0)
        return DeliveryResult.ok()


@pytest.fixture
def stub_gateway_cls():
    return StubGateway


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(f"sqlite:///{tmp_path / 'permits.db'}", connect_args={"check_same_thread": False})
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def employee(db):
    emp = Employee(employee_code="EMP0001", name="Amina Diallo", department="Sales",
                   grade="G3", phone="+15550001", is_active=True)
    db.add(emp)
    db.commit()
    return emp


@pytest.fixture
def inactive_employee(db):
    emp = Employee(employee_code="EMP0099", name="Former Staff", department="Finance",
                   grade="G2", is_active=False)
    db.add(emp)
    db.commit()
    return emp


@pytest.fixture
def hr_user(db):
    user = HrUser(name="HR Administrator", email="hr@company.com", is_hr=True)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def window():
    """Tomorrow 09:00–17:00 (naive UTC)."""
    tomorrow = (utcnow() + timedelta(days=1)).replace(minute=0, second=0, microsecond=0)
    return tomorrow.replace(hour=9), tomorrow.replace(hour=17)


@pytest.fixture
def client(session_factory, gateway):
    from vehicle_permits.main import app

    def _override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()
