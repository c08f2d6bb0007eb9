from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .core.identity import MatchReason, MatchThresholds, NameComparisonResult, NameMatcher
from .ocr import KycUploadResponse
from .session import SessionProvider

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_REASON = "Verification failed"


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    MANUAL_REVIEW = "manual_review"
    MISMATCH = "mismatch"
    REJECTED = "rejected"
    ERROR = "error"


@dataclass(slots=True)
class VerificationOutcome:
    status: VerificationStatus
    kyc_status: Optional[str] = None
    extracted_name: Optional[str] = None
    profile_name: Optional[str] = None
    name_match: Optional[NameComparisonResult] = None
    failure_reason: Optional[str] = None

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "status": self.status.value,
            "kycStatus": self.kyc_status,
            "extractedName": self.extracted_name,
            "profileName": self.profile_name,
        }
        if self.name_match is not None:
            record["nameMatch"] = self.name_match.to_record()
        if self.failure_reason:
            record["failureReason"] = self.failure_reason
        return record


class KycVerifier:
    """Turns one upload response into a verification outcome."""

    def __init__(self, thresholds: Optional[MatchThresholds] = None) -> None:
        self.matcher = NameMatcher(thresholds)

    def verify(self, response: KycUploadResponse, profile_name: Optional[str]) -> VerificationOutcome:
        if response.is_rejected:
            reason = response.verification_failure_reason or DEFAULT_FAILURE_REASON
            logger.info("Document rejected by verification service: %s", reason)
            return VerificationOutcome(
                status=VerificationStatus.REJECTED,
                kyc_status=response.kyc_status,
                extracted_name=response.extracted_name,
                profile_name=profile_name,
                failure_reason=reason,
            )

        extracted = response.extracted_name
        result = self.matcher.compare(extracted, profile_name)
        status = _status_for(result)
        logger.debug(
            "Name check %r vs %r: %s (%d%%)",
            extracted,
            profile_name,
            result.reason,
            result.percent,
        )
        return VerificationOutcome(
            status=status,
            kyc_status=response.kyc_status,
            extracted_name=extracted,
            profile_name=profile_name,
            name_match=result,
        )

    def verify_for_session(self, response: KycUploadResponse, session: SessionProvider) -> VerificationOutcome:
        user = session.get_current_user()
        if user is None:
            logger.warning("No user in session; name check will report missing data")
        return self.verify(response, user.name if user else None)


def _status_for(result: NameComparisonResult) -> VerificationStatus:
    if result.is_match:
        return VerificationStatus.VERIFIED
    if result.reason in (MatchReason.PARTIAL, MatchReason.MISSING_DATA):
        return VerificationStatus.MANUAL_REVIEW
    return VerificationStatus.MISMATCH
