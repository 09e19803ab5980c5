"""User profile management."""

import logging

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.errors import ConflictError, ForbiddenError, InternalError, NotFoundError, ValidationError
from app.models.blog import Blog
from app.models.user import User
from app.services.authorization import is_super_admin, owns_or_is_super_admin
from app.services.media import MediaService, get_media_service
from app.services.user_store import UserStore, get_user_store, normalize_email

logger = logging.getLogger("inkwell")

AVATAR_FOLDER = "avatars"


class UserService:
    """Handles listing, profile updates, avatars and deletion."""

    def __init__(self, store: UserStore, media: MediaService) -> None:
        self.store = store
        self.media = media

    def list_users(self, db: Session, acting_user: User, limit: int = 10, offset: int = 0) -> tuple[list[User], int]:
        """List users, newest first. Superadmin only. Returns (items, total_count)."""
        if not is_super_admin(acting_user):
            raise ForbiddenError("Only a superadmin can list users")
        query = db.query(User)
        total = query.count()
        items = query.order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit).all()
        return items, total

    def get_user(self, db: Session, user_id: int) -> User:
        user = self.store.find_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_info(
        self,
        db: Session,
        acting_user: User,
        user_id: int,
        full_name: str | None = None,
        email: str | None = None,
    ) -> User:
        """Update name and/or email. Allowed for the account owner or a superadmin."""
        if not owns_or_is_super_admin(acting_user, user_id):
            raise ForbiddenError("Not allowed to update this user")
        user = self.get_user(db, user_id)

        fields: dict[str, str] = {}
        if full_name is not None and full_name.strip():
            fields["full_name"] = full_name.strip().lower()
        if email is not None and email.strip():
            new_email = normalize_email(email)
            if new_email != user.email and self.store.find_by_email(db, new_email):
                raise ConflictError("User already exists with this email")
            fields["email"] = new_email

        if not fields:
            raise ValidationError("Nothing to update")
        return self.store.update(db, user, **fields)

    async def update_avatar(self, db: Session, user: User, upload: UploadFile) -> User:
        """Upload a new avatar and replace the old one."""
        asset = await self.media.upload(upload, AVATAR_FOLDER)
        if not asset.url:
            raise InternalError("Something went wrong while uploading avatar")
        old_url = user.avatar_url
        user = self.store.update(db, user, avatar_url=asset.url)
        if old_url:
            self.media.remove(old_url)
        return user

    def delete_user(self, db: Session, acting_user: User, user_id: int) -> None:
        """Delete a user (superadmin only). Avatar cleanup never fails the deletion."""
        if not is_super_admin(acting_user):
            raise ForbiddenError("Only a superadmin can delete users")
        if acting_user.id == user_id:
            raise ForbiddenError("A superadmin cannot delete their own account")
        user = self.get_user(db, user_id)
        avatar_url = user.avatar_url
        # Detach blogs in the same transaction as the delete; committed by store.delete.
        db.query(Blog).filter(Blog.owner_id == user.id).update({Blog.owner_id: None}, synchronize_session=False)
        self.store.delete(db, user)
        logger.info("User %s deleted by %s", user_id, acting_user.id)
        if avatar_url and not self.media.remove(avatar_url):
            logger.warning("Avatar of deleted user %s was not removed", user_id)


_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get singleton user service instance."""
    global _user_service
    if _user_service is None:
        _user_service = UserService(get_user_store(), get_media_service())
    return _user_service
