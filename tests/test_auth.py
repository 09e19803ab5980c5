"""Tests for registration, login and refresh-token rotation."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.errors import (
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    MissingTokenError,
    NotFoundError,
    TokenInvalidError,
    TokenReusedError,
    UnauthenticatedError,
    ValidationError,
)
from app.models.user import Role, User
from app.services.auth import AuthService
from app.services.user_store import UserStore


class TestRegisterService:
    """Tests for AuthService.register."""

    def test_register_normalizes_and_hashes(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "  A@X.com ", "  Ann  ", "secret123")
        user = UserStore().find_by_email(db_session, "a@x.com")
        assert user is not None
        assert user.email == "a@x.com"
        assert user.full_name == "ann"
        assert user.role == Role.USER
        assert user.password_hash != "secret123"
        assert auth_service.hasher.verify("secret123", user.password_hash)

    def test_register_duplicate_normalized_email(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        with pytest.raises(ConflictError):
            auth_service.register(db_session, " A@X.COM ", "Ann Again", "secret123")

    def test_register_duplicate_caught_by_unique_index(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        with patch.object(UserStore, "find_by_email", return_value=None):
            with pytest.raises(ConflictError):
                auth_service.register(db_session, "a@x.com", "Ann Again", "secret123")
        # The failed insert was rolled back; the session keeps working.
        assert db_session.query(User).count() == 1

    def test_register_missing_fields(self, db_session: Session, auth_service: AuthService):
        with pytest.raises(ValidationError):
            auth_service.register(db_session, "a@x.com", "   ", "secret123")
        with pytest.raises(ValidationError):
            auth_service.register(db_session, None, "Ann", "secret123")

    def test_register_role_requires_superadmin(self, db_session: Session, auth_service: AuthService):
        with pytest.raises(ForbiddenError):
            auth_service.register(db_session, "a@x.com", "Ann", "secret123", role=Role.SUPER_ADMIN)

        plain = auth_service.register(db_session, "b@x.com", "Bob", "secret123")
        with pytest.raises(ForbiddenError):
            auth_service.register(
                db_session, "c@x.com", "Cat", "secret123", role=Role.SUPER_ADMIN, acting_user=plain
            )

    def test_register_role_by_superadmin(self, db_session: Session, auth_service: AuthService):
        admin = UserStore().create(
            db_session,
            email="root@x.com",
            full_name="root",
            password_hash=auth_service.hasher.hash("secret123"),
            role=Role.SUPER_ADMIN,
        )
        user = auth_service.register(
            db_session, "d@x.com", "Dee", "secret123", role=Role.SUPER_ADMIN, acting_user=admin
        )
        assert user.role == Role.SUPER_ADMIN


class TestLoginService:
    """Tests for AuthService.login."""

    def test_login_unknown_email_and_wrong_password_look_the_same(
        self, db_session: Session, auth_service: AuthService
    ):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        with pytest.raises(InvalidCredentialsError) as unknown:
            auth_service.login(db_session, "nobody@x.com", "secret123")
        with pytest.raises(InvalidCredentialsError) as wrong:
            auth_service.login(db_session, "a@x.com", "wrongpass")
        assert unknown.value.message == wrong.value.message

    def test_login_stores_refresh_token(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        result = auth_service.login(db_session, "A@X.COM", "secret123")
        assert result.user.refresh_token == result.tokens.refresh_token

    def test_second_login_invalidates_first_refresh_token(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        first = auth_service.login(db_session, "a@x.com", "secret123")
        auth_service.login(db_session, "a@x.com", "secret123")
        with pytest.raises(TokenReusedError):
            auth_service.refresh(db_session, first.tokens.refresh_token)


class TestRefreshService:
    """Tests for AuthService.refresh."""

    def test_refresh_rotates_both_tokens(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        login = auth_service.login(db_session, "a@x.com", "secret123")
        rotated = auth_service.refresh(db_session, login.tokens.refresh_token)
        assert rotated.access_token != login.tokens.access_token
        assert rotated.refresh_token != login.tokens.refresh_token

        user = UserStore().find_by_email(db_session, "a@x.com")
        assert user.refresh_token == rotated.refresh_token

    def test_rotated_out_token_is_reuse(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        login = auth_service.login(db_session, "a@x.com", "secret123")
        rotated = auth_service.refresh(db_session, login.tokens.refresh_token)
        with pytest.raises(TokenReusedError):
            auth_service.refresh(db_session, login.tokens.refresh_token)
        # The current token still works.
        auth_service.refresh(db_session, rotated.refresh_token)

    def test_missing_token(self, db_session: Session, auth_service: AuthService):
        with pytest.raises(MissingTokenError):
            auth_service.refresh(db_session, None)
        with pytest.raises(MissingTokenError):
            auth_service.refresh(db_session, "")

    def test_access_token_is_not_a_refresh_token(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        login = auth_service.login(db_session, "a@x.com", "secret123")
        with pytest.raises(TokenInvalidError):
            auth_service.refresh(db_session, login.tokens.access_token)

    def test_refresh_for_deleted_user(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        login = auth_service.login(db_session, "a@x.com", "secret123")
        store = UserStore()
        store.delete(db_session, store.find_by_email(db_session, "a@x.com"))
        with pytest.raises(NotFoundError):
            auth_service.refresh(db_session, login.tokens.refresh_token)

    def test_logout_then_refresh_fails(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        login = auth_service.login(db_session, "a@x.com", "secret123")
        auth_service.logout(db_session, login.user.id)
        with pytest.raises((TokenInvalidError, TokenReusedError)):
            auth_service.refresh(db_session, login.tokens.refresh_token)

    def test_swap_loses_when_token_changed_underneath(self, db_session: Session, auth_service: AuthService):
        """The conditional update only succeeds while the stored token is still the expected one."""
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        login = auth_service.login(db_session, "a@x.com", "secret123")
        store = UserStore()
        user_id = login.user.id
        assert store.swap_refresh_token(db_session, user_id, login.tokens.refresh_token, "winner") is True
        assert store.swap_refresh_token(db_session, user_id, login.tokens.refresh_token, "loser") is False
        assert db_session.get(User, user_id).refresh_token == "winner"


class TestAuthenticateService:
    def test_authenticate_valid(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        login = auth_service.login(db_session, "a@x.com", "secret123")
        assert auth_service.authenticate(db_session, login.tokens.access_token).email == "a@x.com"

    def test_authenticate_rejects_refresh_token(self, db_session: Session, auth_service: AuthService):
        auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        login = auth_service.login(db_session, "a@x.com", "secret123")
        with pytest.raises(UnauthenticatedError):
            auth_service.authenticate(db_session, login.tokens.refresh_token)

    def test_authenticate_missing(self, db_session: Session, auth_service: AuthService):
        with pytest.raises(UnauthenticatedError):
            auth_service.authenticate(db_session, None)


class TestChangePasswordService:
    def test_change_password(self, db_session: Session, auth_service: AuthService):
        user = auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        auth_service.change_password(db_session, user, "secret123", "newsecret456")
        auth_service.login(db_session, "a@x.com", "newsecret456")
        with pytest.raises(InvalidCredentialsError):
            auth_service.login(db_session, "a@x.com", "secret123")

    def test_change_password_wrong_old(self, db_session: Session, auth_service: AuthService):
        user = auth_service.register(db_session, "a@x.com", "Ann", "secret123")
        with pytest.raises(InvalidCredentialsError):
            auth_service.change_password(db_session, user, "nope", "newsecret456")


class TestAuthApiScenario:
    """End-to-end register / login / refresh over HTTP."""

    def test_full_flow(self, client: TestClient):
        body = {"email": "a@x.com", "full_name": "Ann", "password": "secret123"}
        response = client.post("/api/v1/users/register", json=body)
        assert response.status_code == 201
        envelope = response.json()
        assert envelope["success"] is True
        assert "password" not in envelope["data"]
        assert "password_hash" not in envelope["data"]
        assert "refresh_token" not in envelope["data"]

        response = client.post("/api/v1/users/register", json=body)
        assert response.status_code == 409
        assert response.json()["error_code"] == "conflict"
        assert response.json()["success"] is False

        response = client.post("/api/v1/users/login", json={"email": "a@x.com", "password": "wrongpass"})
        assert response.status_code == 401
        assert response.json()["error_code"] == "invalid_credentials"

        response = client.post("/api/v1/users/login", json={"email": "a@x.com", "password": "secret123"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["access_token"] and data["refresh_token"]
        assert "password_hash" not in data["user"]
        assert "refresh_token" not in data["user"]
        assert "accessToken" in response.cookies
        assert "refreshToken" in response.cookies
        client.cookies.clear()

        original_refresh = data["refresh_token"]
        response = client.post("/api/v1/users/refresh-token", json={"refresh_token": original_refresh})
        assert response.status_code == 200
        rotated = response.json()["data"]
        assert rotated["refresh_token"] != original_refresh
        assert rotated["access_token"] != data["access_token"]
        client.cookies.clear()

        response = client.post("/api/v1/users/refresh-token", json={"refresh_token": original_refresh})
        assert response.status_code == 401
        assert response.json()["error_code"] == "token_reused"

    def test_register_ignores_role_on_public_route(self, client: TestClient, db_session: Session):
        """The public route has no role field; a smuggled one is dropped."""
        response = client.post(
            "/api/v1/users/register",
            json={"email": "evil@x.com", "full_name": "Eve", "password": "secret123", "role": "superadmin"},
        )
        assert response.status_code == 201
        assert response.json()["data"]["role"] == "user"

    def test_register_race_returns_conflict(self, client: TestClient):
        body = {"email": "race@x.com", "full_name": "Racer", "password": "secret123"}
        assert client.post("/api/v1/users/register", json=body).status_code == 201
        with patch.object(UserStore, "find_by_email", return_value=None):
            response = client.post("/api/v1/users/register", json=body)
        assert response.status_code == 409
        assert response.json()["error_code"] == "conflict"

    def test_register_missing_fields(self, client: TestClient):
        response = client.post("/api/v1/users/register", json={"email": "a@x.com"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "validation_error"

    def test_refresh_from_cookie(self, client: TestClient, test_user: dict):
        client.cookies.set("refreshToken", test_user["refresh_token"])
        response = client.post("/api/v1/users/refresh-token")
        assert response.status_code == 200
        assert response.json()["data"]["refresh_token"] != test_user["refresh_token"]

    def test_refresh_without_token(self, client: TestClient):
        response = client.post("/api/v1/users/refresh-token")
        assert response.status_code == 401
        assert response.json()["error_code"] == "missing_token"

    def test_logout_invalidates_refresh(self, client: TestClient, test_user: dict):
        response = client.post("/api/v1/users/logout", headers=test_user["headers"])
        assert response.status_code == 200

        response = client.post("/api/v1/users/refresh-token", json={"refresh_token": test_user["refresh_token"]})
        assert response.status_code == 401
        assert response.json()["error_code"] in ("token_invalid", "token_reused")

    def test_change_password_api(self, client: TestClient, test_user: dict):
        response = client.post(
            "/api/v1/users/change-password",
            json={"old_password": "password123", "new_password": "newpassword456"},
            headers=test_user["headers"],
        )
        assert response.status_code == 200

        response = client.post("/api/v1/users/login", json={"email": "test@example.com", "password": "newpassword456"})
        assert response.status_code == 200


class TestProtectedRoutes:
    """Tests for the authentication gate."""

    def test_requires_auth(self, client: TestClient):
        response = client.get("/api/v1/users/current-user")
        assert response.status_code == 401
        assert response.json()["error_code"] == "unauthenticated"

    def test_bearer_header(self, client: TestClient, test_user: dict):
        response = client.get("/api/v1/users/current-user", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json()["data"]["email"] == "test@example.com"

    def test_access_cookie(self, client: TestClient, test_user: dict):
        client.cookies.set("accessToken", test_user["access_token"])
        response = client.get("/api/v1/users/current-user")
        assert response.status_code == 200

    def test_refresh_token_is_not_an_access_token(self, client: TestClient, test_user: dict):
        response = client.get(
            "/api/v1/users/current-user",
            headers={"Authorization": f"Bearer {test_user['refresh_token']}"},
        )
        assert response.status_code == 401

    def test_invalid_token(self, client: TestClient):
        response = client.get("/api/v1/users/current-user", headers={"Authorization": "Bearer invalid.token.here"})
        assert response.status_code == 401
        assert "Traceback" not in response.text


class TestHealthCheck:
    """Tests for health check endpoint."""

    def test_health_check(self, client: TestClient):
        response = client.get("/api/v1/healthcheck")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "ok"
        assert data["app"] == "inkwell"
