"""
Pytest configuration and fixtures for testing.

- Uses TEST_DATABASE_URL from .env.local/.env when set (e.g. a Postgres test
  database); each test then runs in a transaction that is rolled back
- Otherwise each test gets its own in-memory SQLite database
- Schema comes from the ORM metadata (Base.metadata.create_all)
- bcrypt cost is lowered so hashing does not dominate the run
"""
import base64
import os
from pathlib import Path

# Settings are read once at import time, so the environment must be
# prepared before any application module is imported.
os.environ["APP_ENV"] = "local"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-client-secret"
os.environ["OAUTH2_AUTHORIZED_REDIRECT_URI"] = "http://localhost:3000/oauth2/redirect"
os.environ["ADMIN_EMAILS"] = "admin@example.com"

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

# Find backend directory (works from any working directory)
BACKEND_DIR = Path(__file__).parent

# Load environment variables (.env.local takes precedence over .env)
env_local = BACKEND_DIR / '.env.local'
env_file = BACKEND_DIR / '.env'

if env_local.exists():
    load_dotenv(env_local)
elif env_file.exists():
    load_dotenv(env_file)

from auth.passwords import hash_password
from db.session import get_db
from db.user_service import create_user
from main import app
from models import AuthProvider, Base

DEFAULT_PASSWORD = "secret1"


def basic_auth(email: str, password: str) -> dict[str, str]:
    """Authorization header for HTTP Basic credentials"""
    token = base64.b64encode(f"{email}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


@pytest.fixture(scope="function")
def test_engine():
    """
    Create test database engine with the current schema.

    - TEST_DATABASE_URL when set (separate database, never production)
    - Fresh in-memory SQLite otherwise
    """
    test_db_url = os.getenv("TEST_DATABASE_URL")
    if test_db_url:
        engine = create_engine(test_db_url, pool_pre_ping=True)
    else:
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_engine):
    """
    Database session for one test.

    On a shared test database all changes are rolled back afterwards;
    commits inside services become savepoint releases.

    Usage:
        def test_create_user(test_db):
            user = create_user(test_db, "test@example.com", "Test User", AuthProvider.GOOGLE)
            assert user.id is not None
    """
    if not os.getenv("TEST_DATABASE_URL"):
        db = Session(bind=test_engine)
        try:
            yield db
        finally:
            db.close()
        return

    connection = test_engine.connect()
    transaction = connection.begin()
    db = Session(bind=connection, join_transaction_mode="create_savepoint")

    try:
        yield db
    finally:
        db.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def client(test_db):
    """Test client with get_db overridden to the test session."""
    def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_local_user(test_db):
    """Factory creating LOCAL users with a known password."""
    def _make(email: str = "local@example.com", password: str = DEFAULT_PASSWORD, name: str = "Local User"):
        return create_user(
            test_db,
            email=email,
            name=name,
            provider=AuthProvider.LOCAL,
            password_hash=hash_password(password),
        )
    return _make


@pytest.fixture
def auth_header():
    """HTTP Basic header builder: auth_header(email, password)"""
    return basic_auth
