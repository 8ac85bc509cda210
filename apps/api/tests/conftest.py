"""Shared fixtures: in-memory SQLite, seeded users, and bearer tokens."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.permissions import ADMIN_ROLE, USER_ROLE
from app.core.security import create_access_token, hash_password
from app.db import get_session
from app.main import app as api
from app.models.user import Base, User

PASSWORD = "correct-horse"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False)

    def override_get_session():
        session = TestingSession()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    api.dependency_overrides[get_session] = override_get_session
    yield TestClient(api)
    api.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    def _make(name: str, email: str, role: str = USER_ROLE, is_active: bool = True) -> User:
        with session_factory() as session:
            user = User(
                name=name,
                email=email,
                password_hash=PASSWORD_HASH,
                role=role,
                is_active=is_active,
            )
            session.add(user)
            session.commit()
            return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user("Ada Admin", "admin@example.com", role=ADMIN_ROLE)


@pytest.fixture
def alice(make_user):
    return make_user("Alice", "alice@example.com")


@pytest.fixture
def bob(make_user):
    return make_user("Bob", "bob@example.com")


@pytest.fixture
def auth():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}

    return _headers


@pytest.fixture
def make_project(client, auth, admin):
    def _make(name: str = "Website Revamp", user_ids: list[int] | None = None, **extra) -> dict:
        body = {"projectName": name, "assignedUserIds": user_ids or [], **extra}
        res = client.post("/projects", json=body, headers=auth(admin))
        assert res.status_code == 201, res.text
        return res.json()["project"]

    return _make


@pytest.fixture
def make_task(client, auth):
    def _make(user: User, project_id: int, actual="1", expected=None, name: str = "Build landing page") -> dict:
        body = {"projectId": project_id, "taskName": name, "actualHours": actual}
        if expected is not None:
            body["expectedHours"] = expected
        res = client.post("/tasks", json=body, headers=auth(user))
        assert res.status_code == 201, res.text
        return res.json()["task"]

    return _make
