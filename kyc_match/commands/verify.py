from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from ..core.identity import MatchThresholds
from ..ocr import load_upload_response, ocr_confidence_band
from ..session import JsonFileSession
from ..verification import KycVerifier, VerificationOutcome
from .output import error, ok, outcome as outcome_line, verdict, warning


def run(
    response_path: Path,
    *,
    profile_name: Optional[str] = None,
    session_file: Optional[Path] = None,
    thresholds: Optional[MatchThresholds] = None,
    json_output: bool = False,
) -> VerificationOutcome:
    response, _raw = load_upload_response(response_path)
    verifier = KycVerifier(thresholds)
    if profile_name is None and session_file is not None:
        outcome = verifier.verify_for_session(response, JsonFileSession(session_file))
    else:
        outcome = verifier.verify(response, profile_name)

    if json_output:
        print(json.dumps(outcome.to_record(), sort_keys=True))
        return outcome

    if outcome.failure_reason:
        print(error("KYC status", f"{outcome.kyc_status}: {outcome.failure_reason}"))
        return outcome
    print(ok("KYC status", outcome.kyc_status))
    if response.ocr_result is not None and response.ocr_result.confidence is not None:
        score = response.ocr_result.confidence
        band = ocr_confidence_band(score)
        line = ok if band == "high" else warning
        print(line("OCR confidence", f"{round(score)}% {band}"))
    print(f"Extracted name: {outcome.extracted_name or 'Not extracted'}")
    if outcome.name_match is not None:
        print(verdict("Name match", outcome.name_match))
    print(outcome_line(outcome))
    return outcome
