"""User account API endpoints."""

from fastapi import APIRouter, Depends, File, Query, Request, Response, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import (
    REFRESH_COOKIE_NAME,
    clear_auth_cookies,
    get_current_user,
    require_super_admin,
    set_auth_cookies,
)
from app.models.user import User
from app.schemas.common import ApiResponse, PageResponse, ok
from app.schemas.user import (
    AddUserRequest,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPairResponse,
    UpdateUserRequest,
    UserResponse,
)
from app.services.auth import get_auth_service
from app.services.user import get_user_service

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.post("/register", response_model=ApiResponse, status_code=201)
def register(body: RegisterRequest, db: Session = Depends(get_db)) -> ApiResponse:
    """Register a new account. Always creates a plain ``user``."""
    user = get_auth_service().register(db, body.email, body.full_name, body.password)
    return ok(UserResponse.model_validate(user), "User registered successfully", status_code=201)


@router.post("/add-user", response_model=ApiResponse, status_code=201)
def add_user(
    body: AddUserRequest,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> ApiResponse:
    """Create an account with an explicit role (superadmin only)."""
    user = get_auth_service().register(
        db, body.email, body.full_name, body.password, role=body.role, acting_user=admin
    )
    return ok(UserResponse.model_validate(user), "User created successfully", status_code=201)


@router.post("/login", response_model=ApiResponse)
def login(body: LoginRequest, response: Response, db: Session = Depends(get_db)) -> ApiResponse:
    """Authenticate and receive an access/refresh token pair (also set as cookies)."""
    result = get_auth_service().login(db, body.email, body.password)
    set_auth_cookies(response, result.tokens)
    data = LoginResponse(
        user=UserResponse.model_validate(result.user),
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
    )
    return ok(data, "User logged in successfully")


@router.post("/refresh-token", response_model=ApiResponse)
def refresh_token(
    request: Request,
    response: Response,
    body: RefreshRequest | None = None,
    db: Session = Depends(get_db),
) -> ApiResponse:
    """Rotate the refresh token. The token comes from the request body or the refresh cookie."""
    presented = (body.refresh_token if body else None) or request.cookies.get(REFRESH_COOKIE_NAME)
    tokens = get_auth_service().refresh(db, presented)
    set_auth_cookies(response, tokens)
    data = TokenPairResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)
    return ok(data, "Access token refreshed")


@router.post("/logout", response_model=ApiResponse)
def logout(
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse:
    """Invalidate the stored refresh token and clear cookies."""
    get_auth_service().logout(db, user.id)
    clear_auth_cookies(response)
    return ok({}, "Logout success")


@router.post("/change-password", response_model=ApiResponse)
def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse:
    get_auth_service().change_password(db, user, body.old_password, body.new_password)
    return ok({}, "Password changed successfully")


@router.get("/current-user", response_model=ApiResponse)
def current_user(user: User = Depends(get_current_user)) -> ApiResponse:
    return ok(UserResponse.model_validate(user), "Current user fetched")


@router.get("/", response_model=ApiResponse)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> ApiResponse:
    """List all users (superadmin only)."""
    items, total = get_user_service().list_users(db, admin, limit=limit, offset=(page - 1) * limit)
    data = PageResponse.build([UserResponse.model_validate(u) for u in items], total, page, limit)
    return ok(data)


@router.post("/avatar", response_model=ApiResponse)
async def update_avatar(
    avatar: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse:
    """Upload a new profile picture."""
    user = await get_user_service().update_avatar(db, user, avatar)
    return ok(UserResponse.model_validate(user), "Avatar updated successfully")


@router.patch("/{user_id}", response_model=ApiResponse)
def update_user(
    user_id: int,
    body: UpdateUserRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse:
    """Update name/email. Owner or superadmin."""
    updated = get_user_service().update_info(db, user, user_id, full_name=body.full_name, email=body.email)
    return ok(UserResponse.model_validate(updated), "User updated successfully")


@router.delete("/{user_id}", response_model=ApiResponse)
def delete_user(
    user_id: int,
    admin: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> ApiResponse:
    """Delete a user and their avatar (superadmin only)."""
    get_user_service().delete_user(db, admin, user_id)
    return ok({"id": user_id}, "User deleted successfully")
