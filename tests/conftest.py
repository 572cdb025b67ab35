"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("SUPABASE_JWT_SECRET", "test-secret-with-enough-length-for-hs256")
os.environ.setdefault("PII_ENCRYPTION_KEY", "test-pii-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_DB", "false")
os.environ.setdefault("STORAGE_PROVIDER", "local")
os.environ.setdefault("REQUIRE_ACTIVITY_PHOTOS", "true")

import time
import uuid
from typing import Generator, Optional

import httpx
import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from agrox.config import settings
from agrox.db import Base, get_db
from agrox.main import app, limiter
from agrox.models.models import User, UserRole, Machine, Client, Location, Service
from agrox.routes.files import get_storage
from agrox.services.auth_client import get_auth_client
from agrox.storage.local_provider import LocalStorageProvider

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


def make_token(user_id, email: Optional[str] = None, first_name: str = "", last_name: str = "", expires_in: int = 3600) -> str:
    payload = {
        "sub": str(user_id),
        "email": email,
        "aud": settings.jwt_audience,
        "exp": int(time.time()) + expires_in,
        "user_metadata": {"first_name": first_name, "last_name": last_name},
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {make_token(user.id, user.email)}"}


class FakeAuthClient:
    """Stands in for the hosted auth service."""

    def __init__(self):
        self.accounts = {}
        self.signed_out = []

    def add(self, email: str, password: str = "secret123", user_id: Optional[uuid.UUID] = None) -> uuid.UUID:
        user_id = user_id or uuid.uuid4()
        self.accounts[email.lower()] = {"id": str(user_id), "email": email.lower(), "password": password}
        return user_id

    def _reject(self, status_code: int, url: str):
        request = httpx.Request("POST", url)
        response = httpx.Response(status_code, request=request)
        raise httpx.HTTPStatusError("rejected", request=request, response=response)

    def sign_in_with_password(self, email: str, password: str):
        account = self.accounts.get(email.lower())
        if account is None or account["password"] != password:
            self._reject(400, "http://auth/token")
        return {"access_token": make_token(account["id"], account["email"]), "user": {"id": account["id"]}}

    def sign_up(self, email: str, password: str, first_name=None, last_name=None):
        if email.lower() in self.accounts:
            self._reject(422, "http://auth/signup")
        self.add(email, password)
        return {"id": self.accounts[email.lower()]["id"]}

    def sign_out(self, access_token: str):
        self.signed_out.append(access_token)

    def admin_list_users(self, page: int = 1, per_page: int = 200):
        users = [{"id": a["id"], "email": a["email"]} for a in self.accounts.values()]
        start = (page - 1) * per_page
        return users[start:start + per_page]


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path) -> LocalStorageProvider:
    return LocalStorageProvider(str(tmp_path / "storage"))


@pytest.fixture
def auth_client() -> FakeAuthClient:
    return FakeAuthClient()


@pytest.fixture(scope="function")
def client(db_session: Session, storage, auth_client) -> Generator[TestClient, None, None]:
    """Create a test client with database, storage and auth overrides."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_auth_client] = lambda: auth_client
    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session):
    """Factory: a profile row with an optional role."""
    def _make(role: Optional[str] = None, email: Optional[str] = None, first_name: str = "Test", last_name: str = "User") -> User:
        user = User(
            id=uuid.uuid4(),
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            first_name=first_name,
            last_name=last_name,
        )
        db_session.add(user)
        db_session.flush()
        if role:
            db_session.add(UserRole(user_id=user.id, role=role))
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def operator(make_user) -> User:
    return make_user("OPERADOR", email="operator@example.com", first_name="Ana", last_name="Silva")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("ADMIN", email="admin@example.com")


@pytest.fixture
def coordinator(make_user) -> User:
    return make_user("COORDENADOR", email="coord@example.com")


@pytest.fixture
def super_admin(make_user) -> User:
    return make_user("SUPER_ADMIN", email="root@example.com")


@pytest.fixture
def machine(db_session: Session) -> Machine:
    m = Machine(internal_id="T-01", brand="John Deere", name="Trator", model="6120M", plate="AA-00-BB", status="ACTIVE")
    db_session.add(m)
    db_session.commit()
    db_session.refresh(m)
    return m


@pytest.fixture
def master_data(db_session: Session):
    c = Client(name="Quinta do Vale")
    s = Service(name="Lavoura")
    db_session.add_all([c, s])
    db_session.flush()
    loc = Location(client_id=c.id, name="Parcela 3")
    db_session.add(loc)
    db_session.commit()
    return {"client": c, "location": loc, "service": s}
