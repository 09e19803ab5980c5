"""Media host: stores uploaded images and serves them under MEDIA_BASE_URL."""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from app.config import Settings, get_settings
from app.errors import ValidationError

logger = logging.getLogger("inkwell")

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
ALLOWED_MIME_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


@dataclass
class MediaAsset:
    """A stored image."""

    url: str
    path: Path


class MediaService:
    """Handles image upload validation, storage and removal."""

    def __init__(self, settings: Settings) -> None:
        self.media_dir = Path(settings.MEDIA_DIR)
        self.base_url = settings.MEDIA_BASE_URL.rstrip("/")
        self.max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    def validate_upload_metadata(self, filename: str, content_type: str | None) -> str | None:
        """Validate upload file metadata (extension + MIME). Returns error message or None if valid."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            return f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        if content_type and content_type not in ALLOWED_MIME_TYPES:
            return f"Invalid content type '{content_type}'. Must be an image."
        return None

    async def upload(self, upload: UploadFile, folder: str) -> MediaAsset:
        """Stream an uploaded image to disk with size limit.

        Raises ValidationError for a bad file type or a file over the size limit.
        """
        error = self.validate_upload_metadata(upload.filename or "", upload.content_type)
        if error:
            raise ValidationError(error)

        ext = Path(upload.filename or "image.bin").suffix.lower()
        stored_filename = f"{uuid.uuid4().hex}{ext}"
        folder_dir = self.media_dir / folder
        folder_dir.mkdir(parents=True, exist_ok=True)

        file_path = folder_dir / stored_filename
        file_size = 0
        chunk_size = 1024 * 64

        try:
            with open(file_path, "wb") as f:
                while True:
                    chunk = await upload.read(chunk_size)
                    if not chunk:
                        break
                    file_size += len(chunk)
                    if file_size > self.max_bytes:
                        raise ValidationError(f"File too large. Maximum: {self.max_bytes // (1024 * 1024)}MB")
                    f.write(chunk)
        except ValidationError:
            if file_path.exists():
                os.remove(file_path)
            raise

        if file_size == 0:
            os.remove(file_path)
            raise ValidationError("Uploaded file is empty")

        url = f"{self.base_url}/{folder}/{stored_filename}"
        logger.info("Stored media %s (%d bytes)", url, file_size)
        return MediaAsset(url=url, path=file_path)

    def _path_for(self, url: str) -> Path | None:
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            return None
        relative = Path(url[len(prefix) :])
        if relative.is_absolute() or ".." in relative.parts:
            return None
        return self.media_dir / relative

    def remove(self, url: str | None) -> bool:
        """Best-effort removal of a stored image. Failures are logged, never raised."""
        if not url:
            return False
        path = self._path_for(url)
        if path is None:
            logger.warning("Refusing to remove media outside %s: %s", self.base_url, url)
            return False
        try:
            path.unlink()
        except OSError as e:
            logger.warning("Failed to remove media %s: %s", url, e)
            return False
        return True


_media_service: MediaService | None = None


def get_media_service() -> MediaService:
    """Get singleton media service instance."""
    global _media_service
    if _media_service is None:
        _media_service = MediaService(get_settings())
    return _media_service
