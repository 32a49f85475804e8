"""
College Issue Portal - Test Configuration and Fixtures
"""
import os

# Set testing environment before the app reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret-for-testing-only"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.db.base import Base
from app.db.session import engine, SessionLocal
from app.core.security import hash_password, make_tokens
from app.models.department import Department
from app.models.user import AppRole, Profile, UserRoleAssignment

_PASSWORD_HASH = hash_password("testpassword123")


@pytest.fixture
def db():
    """Fresh schema and session for each test"""
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def departments(db):
    cs = Department(name="Computer Science", code="CS")
    ec = Department(name="Electronics", code="EC")
    db.add_all([cs, ec])
    db.commit()
    return {"CS": cs, "EC": ec}


@pytest.fixture
def make_user(db):
    """Factory: make_user("alice", department=cs, roles=[AppRole.hod])"""
    def _make(name: str, department: Department | None = None, roles=()):
        user = Profile(
            college_id=name.upper(),
            full_name=name.title(),
            email=f"{name}@college.ac.in",
            hashed_password=_PASSWORD_HASH,
            department_id=department.id if department else None,
            is_active=True,
        )
        db.add(user)
        db.commit()
        for role in roles:
            db.add(UserRoleAssignment(user_id=user.id, role=role))
        db.commit()
        db.refresh(user)
        return user
    return _make


def auth_headers(user: Profile) -> dict:
    token = make_tokens(user.id)["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student(make_user, departments):
    return make_user("student", departments["CS"], [AppRole.student])


@pytest.fixture
def hod_cs(make_user, departments):
    return make_user("hodcs", departments["CS"], [AppRole.hod])


@pytest.fixture
def hod_ec(make_user, departments):
    return make_user("hodec", departments["EC"], [AppRole.hod])


@pytest.fixture
def principal(make_user):
    return make_user("principal", None, [AppRole.principal])


@pytest.fixture
def report(client):
    """Submit an issue through the API and return its JSON."""
    def _report(user: Profile, department: Department, title: str = "Broken fan", **extra):
        data = {
            "department_id": str(department.id),
            "room_no": extra.pop("room_no", "B-204"),
            "item_id": extra.pop("item_id", "FAN-12"),
            "title": title,
        }
        data.update(extra)
        r = client.post("/issues", data=data, headers=auth_headers(user))
        assert r.status_code == 201, r.text
        return r.json()
    return _report


@pytest.fixture
def auth():
    return auth_headers
