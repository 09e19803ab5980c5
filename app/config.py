"""Configuration settings for Inkwell."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./inkwell.db")

    # JWT: access and refresh tokens are signed with distinct secrets
    ACCESS_TOKEN_SECRET: str = os.getenv("ACCESS_TOKEN_SECRET", secrets.token_urlsafe(32))
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    REFRESH_TOKEN_SECRET: str = os.getenv("REFRESH_TOKEN_SECRET", secrets.token_urlsafe(32))
    REFRESH_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_MINUTES", "14400"))
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # Password hashing
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Cookies / CORS
    COOKIE_SECURE: bool = os.getenv("COOKIE_SECURE", "true").lower() == "true"
    CORS_ORIGIN: str = os.getenv("CORS_ORIGIN", "http://localhost:3000")

    # Media
    MEDIA_DIR: str = os.getenv("MEDIA_DIR", "media")
    MEDIA_BASE_URL: str = os.getenv("MEDIA_BASE_URL", "/media")
    MAX_UPLOAD_SIZE_MB: int = int(os.getenv("MAX_UPLOAD_SIZE_MB", "5"))
    MAX_JSON_BODY_KB: int = int(os.getenv("MAX_JSON_BODY_KB", "16"))

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGIN.split(",") if o.strip()]

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if not os.getenv("ACCESS_TOKEN_SECRET") or not os.getenv("REFRESH_TOKEN_SECRET"):
            errors.append("Token secrets are not set - using auto-generated keys (not persistent across restarts)")
        if self.ACCESS_TOKEN_SECRET == self.REFRESH_TOKEN_SECRET:
            errors.append("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        if self.REFRESH_TOKEN_EXPIRE_MINUTES <= self.ACCESS_TOKEN_EXPIRE_MINUTES:
            errors.append("REFRESH_TOKEN_EXPIRE_MINUTES must be longer than ACCESS_TOKEN_EXPIRE_MINUTES")
        if self.BCRYPT_ROUNDS < 4 or self.BCRYPT_ROUNDS > 31:
            errors.append("BCRYPT_ROUNDS must be between 4 and 31")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
