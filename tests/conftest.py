"""Pytest configuration and fixtures."""

import os

# Set test environment variables before importing settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from bookkeeper.auth import create_access_token, hash_password
from bookkeeper.database import Base, engine, get_db
from bookkeeper.main import app
from bookkeeper.models import Client, Service, User

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Fresh in-memory schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """API client; each request gets its own session on the shared in-memory database."""

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, login: str, role: str, full_name: str) -> User:
    user = User(login=login, role=role, full_name=full_name, password_hash=hash_password("secret123"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def admin(db):
    return make_user(db, "admin", "admin", "Alice Admin")


@pytest.fixture
def manager(db):
    return make_user(db, "manager", "manager", "Mark Manager")


@pytest.fixture
def employee(db):
    return make_user(db, "nurse1", "employee", "Nina Nurse")


@pytest.fixture
def employee2(db):
    return make_user(db, "nurse2", "employee", "Oleg Orderly")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def manager_headers(manager):
    return auth_headers(manager)


@pytest.fixture
def employee_headers(employee):
    return auth_headers(employee)


@pytest.fixture
def employee2_headers(employee2):
    return auth_headers(employee2)


@pytest.fixture
def consultation(db):
    """Service priced at 100 per patient."""
    service = Service(name="Consultation", price=100)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def patient(db):
    record_client = Client(full_name="Paula Patient", phone="+15550100")
    db.add(record_client)
    db.commit()
    db.refresh(record_client)
    return record_client


@pytest.fixture
def create_record(client, admin_headers, consultation, patient):
    """Factory: book a record through the API and return its JSON."""

    def _create(**overrides):
        body = {
            "clientId": patient.id,
            "serviceId": consultation.id,
            "date": "2025-03-10",
            "time": "10:00",
            "patientCount": 1,
        }
        body.update(overrides)
        response = client.post("/records", json=body, headers=admin_headers)
        assert response.status_code == 200, response.text
        return response.json()

    return _create
