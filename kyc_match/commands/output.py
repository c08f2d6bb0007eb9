from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.identity import NameComparisonResult
from ..verification import VerificationOutcome, VerificationStatus


@dataclass(frozen=True, slots=True)
class CheckLine:
    label: str
    status: str
    detail: Optional[str] = None

    def render(self) -> str:
        if self.detail:
            return f"{self.label}: {self.status} ({self.detail})"
        return f"{self.label}: {self.status}"


def ok(label: str, detail: Optional[str] = None) -> str:
    return CheckLine(label, "OK", detail).render()


def warning(label: str, detail: Optional[str] = None) -> str:
    return CheckLine(label, "WARNING", detail).render()


def error(label: str, detail: Optional[str] = None) -> str:
    return CheckLine(label, "ERROR", detail).render()


def skipped(label: str, detail: Optional[str] = None) -> str:
    return CheckLine(label, "SKIPPED", detail).render()


def verdict(label: str, result: NameComparisonResult) -> str:
    status = "MATCH" if result.is_match else "NO MATCH"
    return CheckLine(label, status, f"{result.percent}% - {result.reason}").render()


OUTCOME_LABELS = {
    VerificationStatus.VERIFIED: ok,
    VerificationStatus.MANUAL_REVIEW: warning,
    VerificationStatus.MISMATCH: error,
    VerificationStatus.REJECTED: error,
    VerificationStatus.ERROR: error,
}


def outcome(result: VerificationOutcome) -> str:
    line = OUTCOME_LABELS.get(result.status, warning)
    return line("Outcome", result.status.value)
