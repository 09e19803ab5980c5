"""Response envelope shared by every endpoint."""

from typing import Any

from pydantic import BaseModel


class ApiResponse(BaseModel):
    status_code: int
    data: Any = None
    message: str = "Success"
    success: bool = True


class ErrorResponse(ApiResponse):
    error_code: str
    errors: list[Any] = []
    success: bool = False


class PageResponse(BaseModel):
    """One page of a listing."""

    items: list[Any]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, items: list[Any], total: int, page: int, limit: int) -> "PageResponse":
        total_pages = (total + limit - 1) // limit if total else 0
        return cls(
            items=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


def ok(data: Any = None, message: str = "Success", status_code: int = 200) -> ApiResponse:
    return ApiResponse(status_code=status_code, data=data, message=message, success=status_code < 400)
