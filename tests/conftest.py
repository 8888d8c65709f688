import os

# Settings are read at import time, so the environment comes first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CACHE_DRIVER"] = "none"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"

import itertools

import pytest
from fastapi.testclient import TestClient

from alumni.core.database import Base, SessionLocal, engine
from alumni.core.hasher import PasswordHelper
from alumni.core.security import jwt_manager
from alumni.models import Tenant, User
from main import app

_emails = itertools.count(1)


@pytest.fixture(autouse=True)
def setup_test_database():
    """Fresh schema for every test"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def tenant(db):
    tenant = Tenant(name="Riverside College")
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture
def other_tenant(db):
    tenant = Tenant(name="Hillside University")
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture
def make_user(db, tenant):
    """Create a user with the given global role"""

    def _make(role="alumni", tenant_id=None, full_name=None, password=None):
        n = next(_emails)
        user = User(
            email=f"user{n}@example.com",
            full_name=full_name or f"User {n}",
            role=role,
            tenant_id=tenant_id if tenant_id is not None else tenant.id,
            hashed_password=PasswordHelper.hash_password(password) if password else None,
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth():
    def _headers(user):
        token = jwt_manager.create_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def staff(make_user):
    return make_user(role="staff", full_name="Staff Creator")


@pytest.fixture
def alumni(make_user):
    return make_user(role="alumni", full_name="Alice Alumni")


@pytest.fixture
def make_community(client, auth, staff):
    """Create a community through the API, owned by ``staff`` unless another owner is given"""

    def _make(owner=None, **overrides):
        payload = {
            "name": overrides.pop("name", f"Community {next(_emails)}"),
            "description": "A place for graduates to keep in touch",
            "type": "open",
        }
        payload.update(overrides)
        response = client.post("/communities/", json=payload, headers=auth(owner or staff))
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def join(client, auth):
    def _join(community_id, user):
        response = client.post(f"/communities/{community_id}/join", headers=auth(user))
        assert response.status_code == 200, response.text
        return response.json()["data"]

    return _join


@pytest.fixture
def make_moderator(client, auth, staff, join):
    """Join ``user`` to an open community and promote them"""

    def _make(community_id, user):
        membership = join(community_id, user)
        response = client.post(
            f"/community-memberships/{membership['id']}/promote", headers=auth(staff)
        )
        assert response.status_code == 200, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def make_post(client, auth):
    def _make(community_id, user, **overrides):
        payload = {"title": "Reunion planning", "content": "Who is coming this year?"}
        payload.update(overrides)
        response = client.post(
            f"/community-posts/community/{community_id}", json=payload, headers=auth(user)
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make
