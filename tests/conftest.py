import os

# Must be set before database.py builds the engine
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date

import pytest
from fastapi.testclient import TestClient

import models  # noqa: F401
from database import Base, SessionLocal, engine
from services.datastore import SqlDataStore


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db):
    return SqlDataStore(db)


@pytest.fixture
def make_student(store):
    """Insert a student row directly, bypassing enrollment validation."""

    def _make(name="Asha Patil", category="School", course="CBSE 10th", total_fee=10000.0, **extra):
        row = {
            "name": name,
            "category": category,
            "course": course,
            "email": f"{name.split()[0].lower()}@example.com",
            "phone": "9800000000",
            "enrollment_date": date(2024, 6, 1),
            "total_fee": total_fee,
            "paid_fee": 0.0,
            "due_amount": total_fee,
            "fee_status": "Unpaid",
            "is_active": True,
        }
        row.update(extra)
        student_id = store.insert("students", row)
        return store.get("students", student_id)

    return _make


@pytest.fixture
def client():
    from main import app

    Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c
    Base.metadata.drop_all(bind=engine)
