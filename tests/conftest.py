import os

# Settings are read at import time; configure before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-investtrack")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from investtrack.database import get_db
from investtrack.dependencies import get_notifier
from investtrack.models.base import Base
from investtrack.config import settings
from investtrack.core.security import hash_password
# Import all model classes to ensure they're registered with SQLAlchemy
from investtrack.models.user import User
from investtrack.models.role import UserRole
from investtrack.models.token import Token
from investtrack.models.file import File
from investtrack.models.firm import Firm
from investtrack.models.member import Member
from investtrack.models.coverage import Coverage
from investtrack.models.interaction import Interaction
from investtrack.models.event import Event
# Import FastAPI app AFTER model imports
from investtrack.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_PASSWORD = "Admin@1234"
MEMBER_PASSWORD = "Member@1234"


class CapturingNotifier:
    """Records password-reset messages instead of sending them"""

    def __init__(self):
        self.codes: dict[int, str] = {}
        self.confirmed: list[int] = []

    def send_reset_code(self, user, code):
        self.codes[user.id] = code

    def send_reset_confirmation(self, user):
        self.confirmed.append(user.id)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def notifier():
    return CapturingNotifier()


@pytest.fixture(scope="function")
def client(db_session, notifier):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id: int | str = 1, expired: bool = False) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": str(user_id), "exp": exp, "iat": datetime.now(UTC)}

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def _create_user(db_session, email: str, name: str, password: str, role: UserRole) -> User:
    user = User(email=email, name=name, password_hash=hash_password(password), role=role)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    return _create_user(db_session, "admin@investtrack.io", "Admin", ADMIN_PASSWORD, UserRole.ADMIN)


@pytest.fixture
def member_user(db_session):
    return _create_user(
        db_session, "member@investtrack.io", "Member", MEMBER_PASSWORD, UserRole.MEMBER
    )


@pytest.fixture
def admin_headers(admin_user):
    """Authorization headers for an admin"""
    return {"Authorization": f"Bearer {create_test_token(admin_user.id)}"}


@pytest.fixture
def member_headers(member_user):
    """Authorization headers for a non-admin user"""
    return {"Authorization": f"Bearer {create_test_token(member_user.id)}"}


# Payload builders shared by the test modules

ADDRESS = {
    "street_line1": "1 Dalal Street",
    "locality": "Fort",
    "state": "Maharashtra",
    "region": "West",
    "country": "India",
    "postal_code": "400001",
}


def broker_payload(**overrides) -> dict:
    payload = {
        "firm_type": "broker",
        "name": "Acme Securities",
        "location_type": "Domestic",
        "sectors": ["Banking", "IT"],
        "address": ADDRESS,
    }
    payload.update(overrides)
    return payload


def investor_payload(**overrides) -> dict:
    payload = {
        "firm_type": "investor",
        "name": "Globex Capital",
        "location_type": "Foreign",
        "regional_focus": ["Asia", "Europe"],
        "fund_size_global": 5000.0,
        "fund_size_indian": 750.0,
    }
    payload.update(overrides)
    return payload


def broker_member_payload(firm_id: int, **overrides) -> dict:
    payload = {
        "member_type": "broker",
        "firm_id": firm_id,
        "name": "Jane Doe",
        "email": "jane.doe@acmesecurities.com",
        "designation": "Analyst",
        "mobile_country_code": "IN",
        "mobile_number": "9876543210",
        "sectors": ["Banking"],
        "address": ADDRESS,
    }
    payload.update(overrides)
    return payload


def investor_member_payload(firm_id: int, **overrides) -> dict:
    payload = {
        "member_type": "investor",
        "firm_id": firm_id,
        "name": "John Roe",
        "email": "john.roe@globexcapital.com",
        "designation": "Fund Manager",
        "sectors": ["Energy"],
        "fund_size_indian": 120.0,
        "regional_focus": ["Asia"],
        "address": {**ADDRESS, "country": "Singapore"},
    }
    payload.update(overrides)
    return payload


def create_firm(client, headers, payload: dict) -> dict:
    response = client.post("/api/firms", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def create_member(client, headers, payload: dict) -> dict:
    response = client.post("/api/members", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def create_interaction(client, headers, firm_id: int, member_id: int, content: str = "Intro call") -> dict:
    response = client.post(
        "/api/interactions",
        headers=headers,
        json={
            "firm_id": firm_id,
            "member_id": member_id,
            "content": content,
            "date_of_interaction": "2024-05-01T10:00:00Z",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()
