"""Pytest configuration and fixtures."""

import os
import tempfile

# Settings are read at import time, so the environment must be prepared first.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("MEDIA_DIR", tempfile.mkdtemp(prefix="inkwell-media-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.config import get_settings  # noqa: E402
from app.database import Base, configure_engine, get_db  # noqa: E402
from app.models.blog import Blog  # noqa: E402, F401
from app.models.user import Role  # noqa: E402
from app.services.auth import AuthService  # noqa: E402
from app.services.jwt import TokenService  # noqa: E402
from app.services.password import PasswordHasher  # noqa: E402
from app.services.user_store import UserStore  # noqa: E402

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 256


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = configure_engine(
        create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency."""
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(name="auth_service")
def auth_service_fixture() -> AuthService:
    return AuthService(TokenService(get_settings()), PasswordHasher(rounds=4), UserStore())


def _login(client: TestClient, email: str, password: str) -> dict:
    response = client.post("/api/v1/users/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    # Tests pass tokens explicitly; drop the cookies login just set.
    client.cookies.clear()
    return {
        "id": data["user"]["id"],
        "email": email,
        "password": password,
        "access_token": data["access_token"],
        "refresh_token": data["refresh_token"],
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
    }


@pytest.fixture(name="test_user")
def test_user_fixture(client: TestClient, db_session: Session, auth_service: AuthService) -> dict:
    """Register and log in a plain user."""
    auth_service.register(db_session, "test@example.com", "Test User", "password123")
    return _login(client, "test@example.com", "password123")


@pytest.fixture(name="other_user")
def other_user_fixture(client: TestClient, db_session: Session, auth_service: AuthService) -> dict:
    auth_service.register(db_session, "other@example.com", "Other User", "password123")
    return _login(client, "other@example.com", "password123")


@pytest.fixture(name="super_admin")
def super_admin_fixture(client: TestClient, db_session: Session) -> dict:
    """Create and log in a superadmin."""
    UserStore().create(
        db_session,
        email="admin@example.com",
        full_name="admin",
        password_hash=PasswordHasher(rounds=4).hash("adminpass123"),
        role=Role.SUPER_ADMIN,
    )
    return _login(client, "admin@example.com", "adminpass123")


@pytest.fixture(name="png_file")
def png_file_fixture():
    """Factory for a multipart image file tuple."""
    import io

    def make(name: str = "image.png") -> tuple:
        return (name, io.BytesIO(PNG_BYTES), "image/png")

    return make
