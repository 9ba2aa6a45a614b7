from datetime import timedelta
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.rate_limit import auth_limiter, chat_limiter
from app.core.timeutils import utcnow
from app.db import Base
from app.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_ids = count(1)


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    auth_limiter.reset()
    chat_limiter.reset()
    yield
    auth_limiter.reset()
    chat_limiter.reset()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a user through the API; returns ``(headers, user)``."""

    def _register(role="student", email=None, password="secret123", full_name=None):
        n = next(_ids)
        payload = {
            "email": email or f"{role}{n}@example.com",
            "password": password,
            "full_name": full_name or f"{role.title()} {n}",
            "role": role,
        }
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return auth_header(data["access_token"]), data["user"]

    return _register


@pytest.fixture
def teacher(register):
    return register("teacher")


@pytest.fixture
def student(register):
    return register("student")


@pytest.fixture
def make_course(client):
    def _make_course(headers, code="CS101", published=True, **fields):
        payload = {"title": f"Course {code}", "description": "Intro", "code": code, "is_published": published}
        payload.update(fields)
        response = client.post("/api/courses", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make_course


@pytest.fixture
def make_assignment(client):
    def _make_assignment(headers, course_id, publish=True, due_in=timedelta(days=7), **fields):
        payload = {
            "course_id": course_id,
            "title": "Homework",
            "description": "Solve the problems",
            "due_date": (utcnow() + due_in).isoformat(),
            "total_points": 100,
        }
        payload.update(fields)
        response = client.post("/api/assignments", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        assignment = response.json()["data"]
        if publish:
            response = client.post(f"/api/assignments/{assignment['id']}/publish", headers=headers)
            assert response.status_code == 200, response.text
            assignment = response.json()["data"]
        return assignment

    return _make_assignment


@pytest.fixture
def two_sessions(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    first, second = Session(), Session()
    try:
        yield first, second
    finally:
        first.close()
        second.close()
        engine.dispose()
