"""Credential store: single-row user queries and updates."""

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError
from app.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    """Every method touches exactly one user row."""

    def find_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == normalize_email(email)).first()

    def find_by_id(self, db: Session, user_id: int) -> User | None:
        return db.get(User, user_id)

    def create(self, db: Session, **fields: Any) -> User:
        user = User(**fields)
        db.add(user)
        self._commit_unique(db)
        db.refresh(user)
        return user

    def update(self, db: Session, user: User, **fields: Any) -> User:
        """Apply the given fields to the user and commit."""
        for key, value in fields.items():
            setattr(user, key, value)
        self._commit_unique(db)
        db.refresh(user)
        return user

    def _commit_unique(self, db: Session) -> None:
        """Commit; a unique-email violation raised by the index becomes a conflict."""
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError("User already exists with this email") from exc

    def delete(self, db: Session, user: User) -> None:
        db.delete(user)
        db.commit()

    def set_refresh_token(self, db: Session, user_id: int, token: str | None) -> None:
        """Overwrite the stored refresh token unconditionally (login / logout)."""
        db.query(User).filter(User.id == user_id).update({User.refresh_token: token}, synchronize_session=False)
        db.commit()
        db.expire_all()

    def swap_refresh_token(self, db: Session, user_id: int, expected: str, new: str) -> bool:
        """Replace the refresh token only if it still equals ``expected``.

        Runs as a single conditional UPDATE, so of two concurrent refreshes
        presenting the same token only one can win. Returns False when no row
        matched.
        """
        updated = (
            db.query(User)
            .filter(User.id == user_id, User.refresh_token == expected)
            .update({User.refresh_token: new}, synchronize_session=False)
        )
        db.commit()
        db.expire_all()
        return updated == 1


_user_store: UserStore | None = None


def get_user_store() -> UserStore:
    """Get singleton user store instance."""
    global _user_store
    if _user_store is None:
        _user_store = UserStore()
    return _user_store
