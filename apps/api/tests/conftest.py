"""
Test configuration and fixtures.

Provides:
- Fresh schema per test on an in-memory SQLite database
- Users per role and JWT token minting for authenticated tests
- HTTPX AsyncClient with proper headers
- Seed helpers for orders/tasks, customers and pending requests
"""
import os
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

# Must be set before the app (and its settings) are imported
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", "sqlite://")
os.environ["ENV"] = "test"
os.environ["TESTING"] = "1"

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session

from uniform_admin.main import app
from uniform_admin.core.deps import get_db, COOKIE_NAME
from uniform_admin.core.security import create_session_token
from uniform_admin.db.base import Base
from uniform_admin.db.enums import Role
from uniform_admin.db.models import Campaign, Customer, DesignTask, UrgentReason, User
from uniform_admin.db.session import engine, SessionLocal

from helpers import seed_task


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Creates a database session on a freshly created schema.

    App code commits freely; the schema is dropped after each test.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


def _make_user(db: Session, role: Role, name: str) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"{role.value}-{uuid.uuid4().hex[:8]}@test.com",
        full_name=name,
        role=role.value,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture(scope="function")
def test_user(db: Session) -> User:
    """Create a test admin user (reviews requests)."""
    return _make_user(db, Role.ADMIN, "Test Admin")


@pytest.fixture(scope="function")
def admin_user(test_user: User) -> User:
    return test_user


@pytest.fixture(scope="function")
def salesperson(db: Session) -> User:
    return _make_user(db, Role.SALESPERSON, "Sam Seller")


@pytest.fixture(scope="function")
def designer(db: Session) -> User:
    return _make_user(db, Role.DESIGNER, "Dana Designer")


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    token: str
    cookie_name: str = COOKIE_NAME


def make_auth(user: User) -> TestAuth:
    token = create_session_token(
        user_id=user.id,
        role=user.role,
        token_version=user.token_version,
    )
    return TestAuth(user=user, token=token)


@pytest.fixture(scope="function")
def test_auth(test_user: User) -> TestAuth:
    """Create JWT token for test user."""
    return make_auth(test_user)


# =============================================================================
# Client Fixtures
# =============================================================================

def _client_for(db: Session, auth: TestAuth | None) -> AsyncClient:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    kwargs = {}
    if auth:
        kwargs["cookies"] = {auth.cookie_name: auth.token}
        kwargs["headers"] = {"X-Requested-With": "XMLHttpRequest"}  # CSRF header
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", **kwargs)


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """
    Create unauthenticated AsyncClient for testing public endpoints.
    """
    async with _client_for(db, None) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(
    db: Session,
    test_auth: TestAuth
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create authenticated (admin) AsyncClient with JWT cookie and CSRF header.
    """
    async with _client_for(db, test_auth) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def salesperson_client(
    db: Session,
    salesperson: User,
) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(db, make_auth(salesperson)) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def designer_client(
    db: Session,
    designer: User,
) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(db, make_auth(designer)) as c:
        yield c

    app.dependency_overrides.clear()


# =============================================================================
# Seed helpers
# =============================================================================

@pytest.fixture(scope="function")
def campaign(db: Session) -> Campaign:
    campaign = Campaign(name="Spring League")
    db.add(campaign)
    db.commit()
    return campaign


@pytest.fixture(scope="function")
def task(db: Session, salesperson: User, campaign: Campaign) -> DesignTask:
    return seed_task(db, created_by=salesperson, campaign=campaign)


@pytest.fixture(scope="function")
def customer(db: Session, salesperson: User) -> Customer:
    customer = Customer(name="Jane Doe", phone="555-0100", created_by=salesperson.id)
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture(scope="function")
def urgent_reason(db: Session) -> UrgentReason:
    reason = UrgentReason(label="Event date", display_order=0)
    db.add(reason)
    db.commit()
    return reason

