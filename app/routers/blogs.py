"""Blog API endpoints."""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.blog import BlogResponse
from app.schemas.common import ApiResponse, PageResponse, ok
from app.services.blog import get_blog_service

router = APIRouter(prefix="/api/v1/blogs", tags=["Blogs"])


@router.get("/", response_model=ApiResponse)
def list_blogs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    query: str | None = None,
    sort_by: str | None = None,
    sort_type: str = "asc",
    user_id: int | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse:
    """List blogs with optional search, sorting and owner filter."""
    items, total = get_blog_service().list_blogs(
        db,
        query=query,
        sort_by=sort_by,
        sort_type=sort_type,
        user_id=user_id,
        limit=limit,
        offset=(page - 1) * limit,
    )
    data = PageResponse.build([BlogResponse.model_validate(b) for b in items], total, page, limit)
    return ok(data)


@router.post("/", response_model=ApiResponse, status_code=201)
async def publish_blog(
    title: str | None = Form(None),
    description: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse:
    """Publish a blog with a thumbnail image."""
    blog = await get_blog_service().publish(db, user, title, description, thumbnail)
    return ok(BlogResponse.model_validate(blog), "Blog published successfully", status_code=201)


@router.get("/{blog_id}", response_model=ApiResponse)
def get_blog(
    blog_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse:
    blog = get_blog_service().get_blog(db, blog_id)
    return ok(BlogResponse.model_validate(blog))


@router.patch("/{blog_id}", response_model=ApiResponse)
async def update_blog(
    blog_id: int,
    title: str | None = Form(None),
    description: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse:
    """Update a blog. Owner or superadmin."""
    blog = await get_blog_service().update_blog(db, user, blog_id, title, description, thumbnail)
    return ok(BlogResponse.model_validate(blog), "Updated successfully")


@router.delete("/{blog_id}", response_model=ApiResponse)
def delete_blog(
    blog_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse:
    """Delete a blog and its thumbnail. Owner or superadmin."""
    get_blog_service().delete_blog(db, user, blog_id)
    return ok({"id": blog_id}, "Deleted successfully")
