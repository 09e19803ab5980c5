"""Inkwell - blog backend with token-based user accounts."""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.errors import AppError
from app.routers import blogs_router, users_router
from app.schemas.common import ErrorResponse, ok

# Logging
logger = logging.getLogger("inkwell")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

settings = get_settings()
for warning in settings.validate():
    logger.warning("Config: %s", warning)

app = FastAPI(title="Inkwell", version="0.1.0")


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """JSON and form bodies are kept small; multipart uploads get the media limit plus headroom."""

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            content_type = request.headers.get("content-type", "")
            if content_type.startswith("multipart/"):
                limit = (settings.MAX_UPLOAD_SIZE_MB + 1) * 1024 * 1024
            else:
                limit = settings.MAX_JSON_BODY_KB * 1024
            if int(content_length) > limit:
                return _error_response(413, "payload_too_large", "Request body too large")
        return await call_next(request)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Hosted media
Path(settings.MEDIA_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/media", StaticFiles(directory=settings.MEDIA_DIR), name="media")

# API routers
app.include_router(users_router)
app.include_router(blogs_router)


def _error_response(status_code: int, error_code: str, message: str, errors: list | None = None) -> JSONResponse:
    body = ErrorResponse(status_code=status_code, error_code=error_code, message=message, errors=errors or [])
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


# --- Exception handlers: every failure becomes the error envelope ---
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle typed application errors."""
    log_fn = logger.error if exc.status_code >= 500 else logger.info
    log_fn("%s %s -> %d %s: %s", request.method, request.url.path, exc.status_code, exc.error_code, exc.message)
    return _error_response(exc.status_code, exc.error_code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed input as a 400 with per-field details."""
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return _error_response(400, "validation_error", "Invalid request", errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    codes = {401: "unauthenticated", 403: "forbidden", 404: "not_found", 405: "method_not_allowed"}
    return _error_response(exc.status_code, codes.get(exc.status_code, "http_error"), str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Never leak internals: log the traceback, return a generic message."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "Something went wrong")


# --- Health check ---
@app.get("/api/v1/healthcheck")
def health_check() -> dict:
    """Health check endpoint."""
    return ok({"status": "ok", "app": "inkwell", "version": "0.1.0"}, "Health check passed").model_dump()
