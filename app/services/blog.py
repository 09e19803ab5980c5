"""Blog service for publishing, search and CRUD."""

import logging

from fastapi import UploadFile
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.errors import ForbiddenError, InternalError, NotFoundError, ValidationError
from app.models.blog import Blog
from app.models.user import User
from app.services.authorization import owns_or_is_super_admin
from app.services.media import MediaService, get_media_service

logger = logging.getLogger("inkwell")

THUMBNAIL_FOLDER = "thumbnails"

SORTABLE_FIELDS = {
    "title": Blog.title,
    "description": Blog.description,
    "created_at": Blog.created_at,
}


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class BlogService:
    """Handles blog publishing, listing, updates and deletion."""

    def __init__(self, media: MediaService) -> None:
        self.media = media

    def list_blogs(
        self,
        db: Session,
        query: str | None = None,
        sort_by: str | None = None,
        sort_type: str = "asc",
        user_id: int | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Blog], int]:
        """List blogs with optional owner filter, text search and sorting. Returns (items, total_count).

        Unknown ``sort_by`` values are ignored and the listing falls back to id order.
        """
        q = db.query(Blog)

        if user_id is not None:
            q = q.filter(Blog.owner_id == user_id)

        if query and query.strip():
            pattern = f"%{_escape_like(query.strip())}%"
            q = q.filter(or_(Blog.title.ilike(pattern, escape="\\"), Blog.description.ilike(pattern, escape="\\")))

        total = q.count()

        column = SORTABLE_FIELDS.get(sort_by or "")
        if column is not None:
            q = q.order_by(column.desc() if sort_type.lower() == "desc" else column.asc(), Blog.id.asc())
        else:
            q = q.order_by(Blog.id.asc())

        return q.offset(offset).limit(limit).all(), total

    def get_blog(self, db: Session, blog_id: int) -> Blog:
        blog = db.get(Blog, blog_id)
        if blog is None:
            raise NotFoundError("No blog found")
        return blog

    async def publish(
        self,
        db: Session,
        owner: User,
        title: str | None,
        description: str | None,
        thumbnail: UploadFile | None,
    ) -> Blog:
        """Create a blog post. Title, description and a thumbnail image are required."""
        title = (title or "").strip()
        description = (description or "").strip()
        if not title or not description:
            raise ValidationError("Title and description are required")
        if thumbnail is None or not thumbnail.filename:
            raise ValidationError("Thumbnail is required")

        asset = await self.media.upload(thumbnail, THUMBNAIL_FOLDER)
        if not asset.url:
            raise InternalError("Something went wrong while uploading thumbnail")

        blog = Blog(title=title, description=description, thumbnail=asset.url, owner_id=owner.id)
        db.add(blog)
        db.commit()
        db.refresh(blog)
        logger.info("Blog %s published by user %s", blog.id, owner.id)
        return blog

    async def update_blog(
        self,
        db: Session,
        acting_user: User,
        blog_id: int,
        title: str | None = None,
        description: str | None = None,
        thumbnail: UploadFile | None = None,
    ) -> Blog:
        """Update title, description and/or thumbnail. Owner or superadmin only."""
        blog = self.get_blog(db, blog_id)
        if not owns_or_is_super_admin(acting_user, blog.owner_id):
            raise ForbiddenError("Not allowed to update this blog")

        fields: dict[str, str] = {}
        if title is not None and title.strip():
            fields["title"] = title.strip()
        if description is not None and description.strip():
            fields["description"] = description.strip()

        old_thumbnail = None
        if thumbnail is not None and thumbnail.filename:
            asset = await self.media.upload(thumbnail, THUMBNAIL_FOLDER)
            fields["thumbnail"] = asset.url
            old_thumbnail = blog.thumbnail

        if not fields:
            raise ValidationError("Nothing to update")

        for key, value in fields.items():
            setattr(blog, key, value)
        db.commit()
        db.refresh(blog)

        if old_thumbnail:
            self.media.remove(old_thumbnail)
        return blog

    def delete_blog(self, db: Session, acting_user: User, blog_id: int) -> None:
        """Delete a blog and its thumbnail. Owner or superadmin only."""
        blog = self.get_blog(db, blog_id)
        if not owns_or_is_super_admin(acting_user, blog.owner_id):
            raise ForbiddenError("Not allowed to delete this blog")
        thumbnail = blog.thumbnail
        db.delete(blog)
        db.commit()
        if thumbnail:
            self.media.remove(thumbnail)


_blog_service: BlogService | None = None


def get_blog_service() -> BlogService:
    """Get singleton blog service instance."""
    global _blog_service
    if _blog_service is None:
        _blog_service = BlogService(get_media_service())
    return _blog_service
