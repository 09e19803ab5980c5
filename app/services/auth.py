"""Authentication service: registration, login and refresh-token rotation."""

import logging
from dataclasses import dataclass

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
from app.services.authorization import is_super_admin
from app.services.jwt import TokenPair, TokenPurpose, TokenService, get_token_service
from app.services.password import PasswordHasher, get_password_hasher, validate_password
from app.services.user_store import UserStore, get_user_store, normalize_email

logger = logging.getLogger("inkwell")


@dataclass
class LoginResult:
    """A logged-in user and the token pair issued to them."""

    user: User
    tokens: TokenPair


class AuthService:
    """Handles user registration, authentication and session rotation."""

    def __init__(self, tokens: TokenService, hasher: PasswordHasher, store: UserStore) -> None:
        self.tokens = tokens
        self.hasher = hasher
        self.store = store

    def register(
        self,
        db: Session,
        email: str | None,
        full_name: str | None,
        password: str | None,
        role: Role = Role.USER,
        acting_user: User | None = None,
    ) -> User:
        """Register a new user.

        Any role other than ``user`` requires ``acting_user`` to be a superadmin.
        The public registration route never passes an acting user.
        """
        email = normalize_email(email or "")
        full_name = (full_name or "").strip().lower()
        password = password or ""
        if not email or not full_name or not password.strip():
            raise ValidationError("All fields are required")

        error = validate_password(password)
        if error:
            raise ValidationError(error)

        if role != Role.USER and (acting_user is None or not is_super_admin(acting_user)):
            raise ForbiddenError("Only a superadmin can assign roles")

        if self.store.find_by_email(db, email):
            raise ConflictError("User already exists with this email")

        user = self.store.create(
            db,
            email=email,
            full_name=full_name,
            password_hash=self.hasher.hash(password),
            role=role,
        )
        logger.info("Registered user %s with role %s", user.id, user.role.value)
        return user

    def login(self, db: Session, email: str | None, password: str | None) -> LoginResult:
        """Verify credentials and issue a fresh token pair."""
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.store.find_by_email(db, email)
        # Same error for unknown email and wrong password.
        if user is None or not self.hasher.verify(password, user.password_hash):
            logger.info("Failed login attempt for %s", normalize_email(email))
            raise InvalidCredentialsError()

        tokens = self.tokens.create_token_pair(user.id)
        self.store.set_refresh_token(db, user.id, tokens.refresh_token)
        db.refresh(user)
        return LoginResult(user=user, tokens=tokens)

    def refresh(self, db: Session, presented: str | None) -> TokenPair:
        """Exchange a refresh token for a new pair, invalidating the presented one."""
        if not presented:
            raise MissingTokenError()

        payload = self.tokens.verify(presented, TokenPurpose.REFRESH)
        user_id = self.tokens.user_id_from(payload)

        user = self.store.find_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")

        if user.refresh_token != presented:
            logger.warning("Rejected reused refresh token for user %s", user_id)
            raise TokenReusedError()

        tokens = self.tokens.create_token_pair(user_id)
        if not self.store.swap_refresh_token(db, user_id, presented, tokens.refresh_token):
            # Another refresh with the same token won the race.
            logger.warning("Concurrent refresh lost for user %s", user_id)
            raise TokenReusedError()
        return tokens

    def logout(self, db: Session, user_id: int) -> None:
        """Forget the stored refresh token."""
        self.store.set_refresh_token(db, user_id, None)

    def change_password(self, db: Session, user: User, old_password: str, new_password: str) -> None:
        if not self.hasher.verify(old_password, user.password_hash):
            raise InvalidCredentialsError("Invalid old password")
        error = validate_password(new_password)
        if error:
            raise ValidationError(error)
        self.store.update(db, user, password_hash=self.hasher.hash(new_password))

    def authenticate(self, db: Session, access_token: str | None) -> User:
        """Resolve the user behind an access token."""
        if not access_token:
            raise UnauthenticatedError()
        try:
            payload = self.tokens.verify(access_token, TokenPurpose.ACCESS)
            user_id = self.tokens.user_id_from(payload)
        except TokenInvalidError:
            raise UnauthenticatedError("Invalid or expired access token") from None

        user = self.store.find_by_id(db, user_id)
        if user is None:
            raise UnauthenticatedError("User no longer exists")
        return user


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService(get_token_service(), get_password_hasher(), get_user_store())
    return _auth_service
