from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(slots=True)
class UserProfile:
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    kyc_status: str = "not_verified"
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "UserProfile":
        known = {"id", "_id", "name", "email", "kycStatus"}
        for key in ("name", "email", "kycStatus"):
            value = record.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"user field {key!r} must be a string, got {type(value).__name__}")
        user_id = record.get("id") or record.get("_id")
        return cls(
            id=str(user_id) if user_id is not None else None,
            name=record.get("name") or None,
            email=record.get("email") or None,
            kyc_status=record.get("kycStatus") or "not_verified",
            extra={k: v for k, v in record.items() if k not in known},
        )


class KycMatchError(Exception):
    """Base class for errors surfaced to the command line."""


class PayloadError(KycMatchError):
    """Raised when an OCR upload response cannot be interpreted."""


class DocumentValidationError(KycMatchError):
    """Raised when an identity image fails the pre-upload checks."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class ConfigError(KycMatchError):
    """Raised when the configuration file is missing or invalid."""
