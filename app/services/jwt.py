"""JWT Token Service."""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.config import Settings, get_settings
from app.errors import TokenInvalidError


class TokenPurpose(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass
class TokenPair:
    """An access token and the refresh token minted alongside it."""

    access_token: str
    refresh_token: str


class TokenService:
    """Handles access/refresh token creation and validation.

    Each purpose has its own secret and lifetime, so a token of one purpose
    never verifies as the other.
    """

    def __init__(self, settings: Settings) -> None:
        self.algorithm = settings.JWT_ALGORITHM
        self._secrets = {
            TokenPurpose.ACCESS: settings.ACCESS_TOKEN_SECRET,
            TokenPurpose.REFRESH: settings.REFRESH_TOKEN_SECRET,
        }
        self._lifetimes = {
            TokenPurpose.ACCESS: timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            TokenPurpose.REFRESH: timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES),
        }

    def _create_token(self, user_id: int, purpose: TokenPurpose) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "type": purpose.value,
            "iat": now,
            "exp": now + self._lifetimes[purpose],
            # Two tokens minted in the same second must still differ.
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secrets[purpose], algorithm=self.algorithm)

    def create_access_token(self, user_id: int) -> str:
        """Create a short-lived access token for the given user."""
        return self._create_token(user_id, TokenPurpose.ACCESS)

    def create_refresh_token(self, user_id: int) -> str:
        """Create a long-lived refresh token for the given user."""
        return self._create_token(user_id, TokenPurpose.REFRESH)

    def create_token_pair(self, user_id: int) -> TokenPair:
        return TokenPair(
            access_token=self.create_access_token(user_id),
            refresh_token=self.create_refresh_token(user_id),
        )

    def decode_token(self, token: str, purpose: TokenPurpose) -> dict[str, Any] | None:
        """Decode and validate a token of the given purpose. Returns None if invalid."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secrets[purpose], algorithms=[self.algorithm])
        except JWTError:
            return None
        if payload.get("type") != purpose.value or not payload.get("sub"):
            return None
        return payload

    def verify(self, token: str, purpose: TokenPurpose) -> dict[str, Any]:
        """Decode a token or raise TokenInvalidError."""
        payload = self.decode_token(token, purpose)
        if payload is None:
            raise TokenInvalidError()
        return payload

    @staticmethod
    def user_id_from(payload: dict[str, Any]) -> int:
        """Extract the integer user id from a verified payload."""
        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise TokenInvalidError("Invalid token payload") from None


_token_service: TokenService | None = None


def get_token_service() -> TokenService:
    """Get singleton token service instance."""
    global _token_service
    if _token_service is None:
        _token_service = TokenService(get_settings())
    return _token_service
