from __future__ import annotations

from pathlib import Path

from ..config import UploadSettings
from ..documents import DocumentCheck, require_valid_document
from ..models import DocumentValidationError
from .output import error, ok


def run(paths: list[Path], settings: UploadSettings) -> list[str]:
    """Check every path and return the ones that failed."""
    failed: list[str] = []
    for path in paths:
        try:
            check: DocumentCheck = require_valid_document(path, settings)
        except DocumentValidationError as exc:
            failed.append(str(path))
            for message in exc.errors:
                print(error(str(path), message))
        else:
            print(ok(str(check.path), f"{check.mime_type}, {check.size_bytes} bytes"))
    return failed
