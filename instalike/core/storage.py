import os
import time
import secrets
import logging
from pathlib import Path
from typing import Iterable, Optional

from fastapi import UploadFile

from instalike.core.config import Settings
from instalike.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ImageStorage:
    """Stores uploaded images in a single flat directory on local disk"""

    def __init__(
        self,
        directory: str,
        url_prefix: str = "/uploads",
        max_size: int = 5 * 1024 * 1024,
        allowed_extensions: Iterable[str] = (".jpg", ".jpeg", ".png", ".gif"),
    ):
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_size = max_size
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions}

        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"Image storage at {self.directory.absolute()} served under {self.url_prefix}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageStorage":
        return cls(
            directory=settings.UPLOAD_DIRECTORY,
            url_prefix=settings.UPLOAD_URL_PREFIX,
            max_size=settings.MAX_UPLOAD_SIZE,
            allowed_extensions=settings.ALLOWED_IMAGE_EXTENSIONS,
        )

    def validate_extension(self, filename: Optional[str]) -> str:
        """Return the lower-cased extension or raise ValidationError"""
        file_extension = os.path.splitext(filename or "")[1].lower()
        if file_extension not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions))
            raise ValidationError(f"Unsupported file format. Please use one of: {allowed}")
        return file_extension

    def generate_filename(self, file_extension: str) -> str:
        """Timestamp plus random suffix, keeping the original extension"""
        return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9):09d}{file_extension}"

    def save(self, upload: UploadFile) -> str:
        """
        Validate and persist one uploaded image.

        Only the client-supplied extension is checked, the bytes are not
        sniffed. Returns the public reference path, e.g. /uploads/<name>.png.
        """
        file_extension = self.validate_extension(upload.filename)

        # Read one byte past the ceiling so oversize files are detected
        # without loading arbitrarily large bodies.
        content = upload.file.read(self.max_size + 1)
        if len(content) > self.max_size:
            limit_mb = self.max_size // (1024 * 1024)
            raise ValidationError(f"File too large. Maximum size is {limit_mb}MB")

        filename = self.generate_filename(file_extension)
        file_path = self.directory / filename
        with open(file_path, "wb") as out_file:
            out_file.write(content)

        logger.info(f"Saved upload {upload.filename!r} as {file_path} ({len(content)} bytes)")
        return f"{self.url_prefix}/{filename}"

    def path_for(self, reference: str) -> Optional[Path]:
        """Map a reference returned by save() back to its file path"""
        if not reference or not reference.startswith(f"{self.url_prefix}/"):
            return None
        filename = reference[len(self.url_prefix) + 1:]
        # Flat directory: anything with a separator did not come from save()
        if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
            return None
        return self.directory / filename

    def delete(self, reference: Optional[str]) -> bool:
        """Remove a stored image; unknown references are ignored"""
        file_path = self.path_for(reference) if reference else None
        if file_path is None or not file_path.exists():
            return False
        try:
            os.remove(file_path)
            logger.info(f"Deleted upload: {file_path}")
            return True
        except OSError as e:
            logger.error(f"Error deleting upload {file_path}: {e}")
            return False
