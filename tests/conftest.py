import itertools
import os

# Must be set before admin_panel reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from admin_panel.core.security import create_access_token
from admin_panel.database import Base, get_db
from admin_panel.main import app
from admin_panel.models.user import ADMIN_ROLES, User, UserRole


# One in-memory database shared by the test thread and the TestClient's
# worker threads.
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


@pytest.fixture
def db_session():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db_session):
    """Factory that inserts users with is_admin derived from the role."""
    counter = itertools.count(1)

    def _make_user(
        username=None,
        email=None,
        role=UserRole.VIEWER,
        is_admin=None,
        subscription_status=None,
        payment_processor_user_id=None,
    ) -> User:
        n = next(counter)
        username = username or f"user{n:03d}"
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            role=role,
            is_admin=(role in ADMIN_ROLES) if is_admin is None else is_admin,
            subscription_status=subscription_status,
            payment_processor_user_id=payment_processor_user_id,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def owner(make_user) -> User:
    return make_user(username="owner", role=UserRole.OWNER)


@pytest.fixture
def admin(make_user) -> User:
    return make_user(username="admin", role=UserRole.ADMIN)


@pytest.fixture
def viewer(make_user) -> User:
    return make_user(username="viewer", role=UserRole.VIEWER)


@pytest.fixture
def client(db_session):
    """TestClient bound to the test session."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build the Bearer header for a session token naming a user."""

    def _auth_headers(user: User) -> dict:
        token = create_access_token({"sub": user.id})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
