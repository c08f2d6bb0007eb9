from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .core.identity import MatchThresholds
from .models import ConfigError


class MatchingSettings(BaseModel):
    match_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    review_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    fuzzy_token_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    min_fuzzy_length: int = Field(default=3, ge=1)

    @model_validator(mode="after")
    def _check_bands(self) -> "MatchingSettings":
        if self.review_threshold > self.match_threshold:
            raise ValueError("review_threshold must not exceed match_threshold")
        return self

    def thresholds(self) -> MatchThresholds:
        return MatchThresholds(
            match=self.match_threshold,
            review=self.review_threshold,
            fuzzy_token=self.fuzzy_token_threshold,
            min_fuzzy_length=self.min_fuzzy_length,
        )


class UploadSettings(BaseModel):
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, gt=0)
    allowed_mime_prefix: str = "image/"


class ReviewSettings(BaseModel):
    inbox: Path = Path("./inbox")
    output: Path = Path("./kyc-verdicts.jsonl")
    worker_concurrency: int = Field(default=2, ge=1)
    settle_seconds: float = Field(default=0.5, ge=0.0)
    session_file: Optional[Path] = None

    @field_validator("inbox", "output", mode="before")
    @classmethod
    def _expand_path(cls, value: str | Path) -> Path:
        if not isinstance(value, (str, Path)) or not str(value).strip():
            raise ValueError("must be a non-empty path")
        return Path(value).expanduser().resolve()

    @field_validator("session_file", mode="before")
    @classmethod
    def _expand_session(cls, value: Optional[str | Path]) -> Optional[Path]:
        if value is None:
            return None
        if not isinstance(value, (str, Path)) or not str(value).strip():
            raise ValueError("must be a non-empty path")
        return Path(value).expanduser().resolve()


class Settings(BaseModel):
    matching: MatchingSettings = MatchingSettings()
    uploads: UploadSettings = UploadSettings()
    review: ReviewSettings = ReviewSettings()

    @classmethod
    def load(cls, path: Optional[Path]) -> "Settings":
        if path is None:
            return cls()
        try:
            with path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh)
        except OSError as exc:
            raise ConfigError(f"Cannot read config {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        try:
            return cls.model_validate(raw or {})
        except ValidationError as exc:
            raise ConfigError(f"Invalid config {path}: {exc}") from exc


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise ConfigError(f"Config file not found: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "kyc-match.yaml", cwd / "kyc-match.yml"):
        if candidate.exists():
            return candidate
    return None
