from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

from staffline.config import Settings, get_settings
from staffline.core.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StoredFile:
    filename: str
    original_name: str
    size: int

    @property
    def url(self) -> str:
        return f"/api/uploads/{self.filename}"


class LicenseStore:
    """Opaque blob store for licence documents, keyed by generated filename."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.root = self.settings.upload_dir

    def save(self, original_name: str, content: bytes, *, field_name: str = "license") -> StoredFile:
        extension = Path(original_name).suffix.lower()
        if extension not in self.settings.upload_extension_set:
            raise ValidationError("Only images (JPEG, JPG, PNG) and PDF files are allowed")
        if not content:
            raise ValidationError("No file uploaded")
        if len(content) > self.settings.max_upload_bytes:
            raise ValidationError(f"File exceeds {self.settings.max_upload_bytes} bytes")

        filename = f"{field_name}_{int(time.time() * 1000)}_{secrets.token_hex(4)}{extension}"
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / filename).write_bytes(content)
        logger.info("stored upload %s (%d bytes)", filename, len(content))
        return StoredFile(filename=filename, original_name=original_name, size=len(content))

    def path_for(self, filename: str) -> Path:
        # generated names never contain separators
        if Path(filename).name != filename or filename.startswith("."):
            raise NotFoundError("File not found")
        path = self.root / filename
        if not path.is_file():
            raise NotFoundError("File not found")
        return path
