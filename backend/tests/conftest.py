import os

# Settings are read at import time, so the test environment goes first
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AUTH_JWT_SECRET"] = "test-identity-secret"
os.environ["PAYMENT_KEY_SECRET"] = "test-payment-secret"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app.core.security import create_identity_token
from app.db.database import SessionLocal, engine
from app.db.models import Base, Booking, Package, User
from app.main import app
from app.services.slugs import slugify


def _add(instance) -> int:
    session = SessionLocal()
    try:
        session.add(instance)
        session.commit()
        return instance.id
    finally:
        session.close()


def auth_headers(subject: str, **claims) -> dict:
    return {"Authorization": f"Bearer {create_identity_token(subject, **claims)}"}


# ────────────────────────────────────────────────
# Database & client
# ────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_schema():
    """Fresh tables for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def test_client():
    """Return a TestClient instance for API testing."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db_session():
    session = SessionLocal()
    yield session
    session.close()


# ────────────────────────────────────────────────
# Record factories
# ────────────────────────────────────────────────

@pytest.fixture
def make_package():
    """Insert a package and return its id."""
    def _make(title="Golden Triangle", **overrides):
        values = {
            "title": title,
            "slug": slugify(title),
            "description": f"{title} full description",
            "short_description": f"{title} in brief",
            "duration": 5,
            "location": "Delhi",
            "price": 1000,
            "images": ["/images/a.jpg"],
            "featured": False,
            "max_group_size": 10,
        }
        values.update(overrides)
        return _add(Package(**values))
    return _make


@pytest.fixture
def make_user():
    """Insert a user and return its id."""
    def _make(external_id="user-1", role="user", **overrides):
        values = {
            "external_id": external_id,
            "email": f"{external_id}@example.com",
            "name": external_id.replace("-", " ").title(),
            "role": role,
        }
        values.update(overrides)
        return _add(User(**values))
    return _make


@pytest.fixture
def make_booking():
    """Insert a booking and return its id."""
    def _make(user_id, package_id, **overrides):
        values = {
            "user_id": user_id,
            "package_id": package_id,
            "start_date": datetime(2030, 1, 10),
            "number_of_people": 2,
            "total_amount": 2000,
            "status": "pending",
            "payment_status": "pending",
            "contact_name": "Asha Verma",
            "contact_email": "asha@example.com",
            "contact_phone": "+91 9876543210",
        }
        values.update(overrides)
        return _add(Booking(**values))
    return _make


# ────────────────────────────────────────────────
# Callers
# ────────────────────────────────────────────────

@pytest.fixture
def customer(make_user):
    """A signed-in customer: {"id": ..., "headers": ...}."""
    user_id = make_user("user-1")
    return {"id": user_id, "headers": auth_headers("user-1", email="user-1@example.com")}


@pytest.fixture
def other_customer(make_user):
    user_id = make_user("user-2")
    return {"id": user_id, "headers": auth_headers("user-2", email="user-2@example.com")}


@pytest.fixture
def admin(make_user):
    user_id = make_user("admin-1", role="admin")
    return {"id": user_id, "headers": auth_headers("admin-1", email="admin-1@example.com")}
