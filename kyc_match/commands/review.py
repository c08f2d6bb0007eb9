from __future__ import annotations

import asyncio
from pathlib import Path

from ..config import Settings
from ..review import InboxWatcher, ReviewQueue, ReviewSummary, VerdictRecorder


def _queue(settings: Settings) -> ReviewQueue:
    recorder = VerdictRecorder(settings.review.output)
    return ReviewQueue(
        settings.review,
        recorder,
        thresholds=settings.matching.thresholds(),
    )


def run(settings: Settings) -> ReviewSummary:
    summary = _queue(settings).run()
    if not summary.processed:
        print(f"No upload responses found in {settings.review.inbox}")
        return summary
    print(f"Reviewed {summary.processed} upload(s):")
    for status in sorted(summary.counts):
        print(f"  {status}: {summary.counts[status]}")
    print(f"Verdicts written to {settings.review.output}")
    return summary


def watch(settings: Settings) -> None:
    watcher = InboxWatcher(_queue(settings))
    print(f"Watching {settings.review.inbox} (Ctrl+C to stop)")
    try:
        asyncio.run(watcher.run())
    except KeyboardInterrupt:
        pass
    print(f"Verdicts written to {Path(settings.review.output)}")
