"""
Models for the KYC upload response returned by the document service.

The service runs OCR on the uploaded identity image and answers with a JSON
document shaped like::

    {
      "kycStatus": "pending",
      "verificationFailureReason": null,
      "ocrResult": {
        "confidence": 87.5,
        "extractedData": {"name": "JOHN SMITH", "number": "...", "dob": "...", "gender": "M"}
      }
    }

Only the fields used for name verification are modelled; unknown keys are
ignored.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import PayloadError

logger = logging.getLogger(__name__)


class ExtractedData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    number: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[str] = None


class OcrResult(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    extracted_data: ExtractedData = Field(default_factory=ExtractedData, alias="extractedData")
    confidence: Optional[float] = None


class KycUploadResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    kyc_status: str = Field(default="pending", alias="kycStatus")
    verification_failure_reason: Optional[str] = Field(default=None, alias="verificationFailureReason")
    ocr_result: Optional[OcrResult] = Field(default=None, alias="ocrResult")

    @property
    def is_rejected(self) -> bool:
        return self.kyc_status == "rejected"

    @property
    def extracted_name(self) -> Optional[str]:
        if self.ocr_result is None:
            return None
        return self.ocr_result.extracted_data.name or None


def parse_upload_response(payload: Any) -> KycUploadResponse:
    """
    Build a KycUploadResponse from a decoded JSON payload.

    A bare OCR result (``extractedData`` at the top level) is accepted and
    wrapped as a pending upload.
    """
    if not isinstance(payload, dict):
        raise PayloadError(f"Expected a JSON object, got {type(payload).__name__}")
    if "ocrResult" not in payload and "extractedData" in payload:
        payload = {"ocrResult": payload}
    try:
        return KycUploadResponse.model_validate(payload)
    except ValidationError as exc:
        raise PayloadError(f"Malformed upload response: {exc}") from exc


def load_upload_response(path: Path) -> tuple[KycUploadResponse, dict[str, Any]]:
    """Read a JSON file and return the parsed response with the raw payload."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise PayloadError(f"Cannot read {path}: {exc}") from exc
    response = parse_upload_response(raw)
    logger.debug("Loaded upload response %s (status=%s)", path, response.kyc_status)
    return response, raw


def extracted_name(payload: Any) -> Optional[str]:
    """
    Name read from the document, or None when the OCR found none.

    Missing or empty names are not errors; only a payload that is not an
    upload response at all raises PayloadError.
    """
    return parse_upload_response(payload).extracted_name


def ocr_confidence_band(score: Optional[float]) -> str:
    """
    Bucket an OCR confidence (0-100) the way the upload screen colours it.

    Examples:
        ocr_confidence_band(85) → "high"
        ocr_confidence_band(55) → "medium"
        ocr_confidence_band(None) → "low"
    """
    value = score or 0
    if value > 70:
        return "high"
    if value > 40:
        return "medium"
    return "low"
