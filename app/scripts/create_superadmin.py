"""
Create the first superadmin (public registration only ever creates plain users).
Run from project root:
  python -m app.scripts.create_superadmin EMAIL FULL_NAME PASSWORD
"""
import argparse
import sys

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models.user import Role
from app.services.password import get_password_hasher, validate_password
from app.services.user_store import get_user_store, normalize_email


def create_superadmin(db: Session, email: str, full_name: str, password: str) -> str | None:
    """Create a superadmin. Returns an error message, or None on success."""
    email = normalize_email(email)
    full_name = full_name.strip().lower()
    if not email or not full_name:
        return "Email and full name are required."
    error = validate_password(password)
    if error:
        return error

    store = get_user_store()
    if store.find_by_email(db, email):
        return f"User '{email}' already exists."
    store.create(
        db,
        email=email,
        full_name=full_name,
        password_hash=get_password_hasher().hash(password),
        role=Role.SUPER_ADMIN,
    )
    return None


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an Inkwell superadmin.")
    parser.add_argument("email")
    parser.add_argument("full_name")
    parser.add_argument("password")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        error = create_superadmin(db, args.email, args.full_name, args.password)
    finally:
        db.close()
    if error:
        print(error, file=sys.stderr)
        return 1
    print(f"Created superadmin '{normalize_email(args.email)}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
