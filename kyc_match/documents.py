"""
Pre-upload checks for identity document images.

Mirrors what the upload form enforces before a file is sent for OCR:
the file must exist, look like an image and stay under the size limit.
"""
from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import UploadSettings
from .models import DocumentValidationError

logger = logging.getLogger(__name__)


@dataclass
class DocumentCheck:
    """Result of checking one document image."""
    path: Path
    valid: bool
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None
    errors: list[str] = field(default_factory=list)


def validate_document(path: Path, settings: Optional[UploadSettings] = None) -> DocumentCheck:
    settings = settings or UploadSettings()
    errors: list[str] = []

    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith(settings.allowed_mime_prefix):
        errors.append("Invalid file type: please upload an image file (JPG, PNG, etc.)")

    size: Optional[int] = None
    try:
        size = path.stat().st_size
    except FileNotFoundError:
        errors.append(f"File not found: {path}")
    except OSError as exc:
        errors.append(f"Cannot read file: {exc}")
    else:
        if size > settings.max_upload_bytes:
            limit_mb = settings.max_upload_bytes / (1024 * 1024)
            errors.append(f"File too large: please upload an image smaller than {limit_mb:g}MB")

    if errors:
        logger.debug("Document %s rejected: %s", path, "; ".join(errors))
    return DocumentCheck(
        path=path,
        valid=not errors,
        mime_type=mime_type,
        size_bytes=size,
        errors=errors,
    )


def require_valid_document(path: Path, settings: Optional[UploadSettings] = None) -> DocumentCheck:
    check = validate_document(path, settings)
    if not check.valid:
        raise DocumentValidationError(check.errors)
    return check
