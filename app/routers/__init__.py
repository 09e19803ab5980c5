"""API routers."""

from app.routers.blogs import router as blogs_router
from app.routers.users import router as users_router

__all__ = ["users_router", "blogs_router"]
