"""Pytest configuration and fixtures"""
import os
import tempfile
from typing import Callable, Generator

# Settings are read at import time, so the environment must be ready first
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="storefront-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from storefront.database import Base, get_db
from storefront.main import app
from storefront.utils.jwt_utils import TokenCodec
from storefront.utils.revocation import TokenRevocationRegistry

TEST_DATABASE_URL = os.environ["DATABASE_URL"]

engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create test client with database session override"""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def codec() -> TokenCodec:
    """Standalone codec for unit tests (same secret as the app)"""
    return TokenCodec("test-secret-key", lifetime_seconds=3600)


@pytest.fixture
def registry(codec: TokenCodec) -> TokenRevocationRegistry:
    return TokenRevocationRegistry(codec)


@pytest.fixture
def sample_signup_data() -> dict:
    """Sample signup body"""
    return {
        "email": "a@x.com",
        "username": "a",
        "password": "secret",
    }


@pytest.fixture
def signup(client: TestClient) -> Callable[..., dict]:
    """Sign a user up and return the response ``data`` (user + token)"""

    def _signup(email: str = "admin@example.com", username: str = "admin", password: str = "password123", role: str = None) -> dict:
        body = {"email": email, "username": username, "password": password}
        if role:
            body["role"] = role
        response = client.post("/api/auth/signup", json=body)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _signup


@pytest.fixture
def admin_headers(signup) -> dict:
    """Bearer headers for an ADMIN user"""
    token = signup()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def super_admin_headers(signup) -> dict:
    """Bearer headers for a SUPER_ADMIN user"""
    token = signup(email="root@example.com", username="root", role="SUPER_ADMIN")["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def sample_product_data() -> dict:
    """Sample product fields (sent as the ``data`` form field)"""
    return {
        "name": "Solitaire Ring",
        "description": "Classic diamond solitaire",
        "price": 1299.99,
        "category": "RINGS",
        "material": "Platinum",
        "gemstone": "Diamond",
        "stock": 5,
    }
