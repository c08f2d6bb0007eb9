from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import Settings
from ..core.identity import compare_names
from ..session import JsonFileSession
from .output import error, ok as ok_line, skipped, warning


@dataclass(slots=True)
class DoctorReport:
    ok: bool
    checks: list[str]


def run(settings: Settings, *, config_path: Optional[Path] = None) -> DoctorReport:
    checks: list[str] = []
    ok = True

    if config_path is None:
        checks.append(ok_line("Config", "defaults (no kyc-match.yaml found)"))
    else:
        checks.append(ok_line("Config", str(config_path)))

    matching = settings.matching
    checks.append(
        ok_line(
            "Thresholds",
            f"match>={matching.match_threshold}, review>={matching.review_threshold}, "
            f"fuzzy>{matching.fuzzy_token_threshold}, min length {matching.min_fuzzy_length}",
        )
    )

    sample = compare_names("JOHN SMITH", "smith john")
    if sample.is_match and sample.confidence == 1.0:
        checks.append(ok_line("Name matcher"))
    else:
        ok = False
        checks.append(error("Name matcher", f"self-test returned {sample.reason}"))

    inbox = settings.review.inbox
    if not inbox.exists():
        checks.append(warning("Inbox", f"missing: {inbox}"))
    elif not inbox.is_dir():
        ok = False
        checks.append(error("Inbox", f"not a directory: {inbox}"))
    else:
        pending = sum(1 for p in inbox.iterdir() if p.suffix.lower() == ".json")
        checks.append(ok_line("Inbox", f"{pending} upload response(s) in {inbox}"))

    output_dir = settings.review.output.parent
    if output_dir.exists() and not output_dir.is_dir():
        ok = False
        checks.append(error("Verdict output", f"parent is not a directory: {output_dir}"))
    else:
        checks.append(ok_line("Verdict output", str(settings.review.output)))

    session_file = settings.review.session_file
    if session_file is None:
        checks.append(skipped("Session", "set review.session_file"))
    else:
        session = JsonFileSession(session_file)
        user = session.get_current_user()
        if user is None:
            checks.append(warning("Session", f"no user in {session_file}"))
        elif not user.name:
            checks.append(warning("Session", "user has no profile name"))
        else:
            checks.append(ok_line("Session", f"user {user.id or '?'} ({user.kyc_status})"))

    return DoctorReport(ok=ok, checks=checks)
