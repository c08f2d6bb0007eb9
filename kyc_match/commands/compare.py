from __future__ import annotations

import json
from typing import Optional

from ..core.identity import MatchThresholds, NameComparisonResult, NameMatcher
from .output import verdict


def run(
    extracted_name: Optional[str],
    profile_name: Optional[str],
    *,
    thresholds: Optional[MatchThresholds] = None,
    json_output: bool = False,
) -> NameComparisonResult:
    result = NameMatcher(thresholds).compare(extracted_name, profile_name)
    if json_output:
        print(json.dumps(result.to_record(), sort_keys=True))
    else:
        print(verdict("Name match", result))
    return result
