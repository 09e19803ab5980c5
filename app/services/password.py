"""Password hashing."""

import bcrypt

from app.config import Settings, get_settings

# bcrypt only looks at the first 72 bytes of the input.
BCRYPT_MAX_BYTES = 72

PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128


class PasswordHasher:
    """Salted bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str | None) -> bool:
        """Verify a plain password against a stored hash. Malformed hashes verify as False."""
        if not hashed:
            return False
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False


def validate_password(password: str) -> str | None:
    """Return an error message if the password length is out of bounds, else None."""
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        return f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters"
    return None


_password_hasher: PasswordHasher | None = None


def get_password_hasher(settings: Settings | None = None) -> PasswordHasher:
    """Get singleton password hasher instance."""
    global _password_hasher
    if _password_hasher is None:
        _password_hasher = PasswordHasher(rounds=(settings or get_settings()).BCRYPT_ROUNDS)
    return _password_hasher
