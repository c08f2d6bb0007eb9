"""
Batch review of OCR upload responses dropped into an inbox directory.

Each inbox file is a JSON upload response with the profile name attached,
either as ``profileName`` or as ``user.name``. Every processed file yields one
JSON line in the verdict output.
"""
from __future__ import annotations

import asyncio
import functools
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Iterator, Optional

from watchdog.observers import Observer

from .config import ReviewSettings
from .core.identity import MatchThresholds
from .models import PayloadError
from .ocr import load_upload_response
from .verification import KycVerifier, VerificationStatus
from .watchdog_handler import InboxHandler

logger = logging.getLogger(__name__)

INBOX_EXTENSIONS = (".json",)


class VerdictRecorder:
    def __init__(self, output_path: Path) -> None:
        self.output_path = output_path
        self._lock = Lock()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text("", encoding="utf-8")

    def record(self, source: Path, payload: dict[str, Any]) -> None:
        payload = {"source": str(source), **payload}
        line = json.dumps(payload, sort_keys=True)
        with self._lock:
            with self.output_path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")


@dataclass
class ReviewSummary:
    processed: int = 0
    counts: dict[str, int] = field(default_factory=dict)

    def add(self, status: str) -> None:
        self.processed += 1
        self.counts[status] = self.counts.get(status, 0) + 1

    @property
    def errors(self) -> int:
        return self.counts.get(VerificationStatus.ERROR.value, 0)


def profile_name_from(raw: dict[str, Any]) -> Optional[str]:
    name = raw.get("profileName")
    if name:
        return str(name)
    user = raw.get("user")
    if isinstance(user, dict) and user.get("name"):
        return str(user["name"])
    return None


class ReviewQueue:
    def __init__(
        self,
        settings: ReviewSettings,
        recorder: VerdictRecorder,
        *,
        thresholds: Optional[MatchThresholds] = None,
    ) -> None:
        self.settings = settings
        self.recorder = recorder
        self.verifier = KycVerifier(thresholds)
        self.summary = ReviewSummary()
        self._summary_lock = Lock()

    def iter_inbox(self) -> Iterator[Path]:
        inbox = self.settings.inbox
        if not inbox.exists():
            logger.warning("Inbox %s does not exist", inbox)
            return
        for path in sorted(inbox.iterdir()):
            if path.is_file() and path.suffix.lower() in INBOX_EXTENSIONS:
                yield path

    def run(self) -> ReviewSummary:
        for path in self.iter_inbox():
            self.process_file(path)
        return self.summary

    def process_file(
        self,
        path: Path,
        *,
        is_final: Optional[Callable[[Path], bool]] = None,
    ) -> Optional[str]:
        """
        Verify one inbox file and record its verdict.

        ``is_final`` decides whether an unparsable file is really broken or
        still being written; when it returns False nothing is recorded and
        None is returned, leaving the file for its next change event.
        """
        try:
            response, raw = load_upload_response(path)
        except PayloadError as exc:
            if is_final is not None and not is_final(path):
                logger.debug("%s is still changing; waiting for the next event", path.name)
                return None
            logger.warning("Skipping %s: %s", path.name, exc)
            status = VerificationStatus.ERROR.value
            self.recorder.record(path, {"status": status, "error": str(exc)})
        else:
            outcome = self.verifier.verify(response, profile_name_from(raw))
            status = outcome.status.value
            logger.info("%s: %s", path.name, status)
            self.recorder.record(path, outcome.to_record())
        with self._summary_lock:
            self.summary.add(status)
        return status


def _signature(path: Path) -> Optional[tuple[int, int]]:
    try:
        stat = path.stat()
    except OSError:
        return None
    return stat.st_mtime_ns, stat.st_size


class InboxWatcher:
    """Processes inbox files as they appear, using a watchdog observer."""

    MAX_SEEN_PATHS = 4096

    def __init__(self, queue: ReviewQueue, *, close_events: Optional[bool] = None) -> None:
        self.review = queue
        self.queue: asyncio.Queue[Path] = asyncio.Queue()
        self.observer: Observer | None = None
        self.ready = asyncio.Event()
        self.close_events = close_events
        self._seen: dict[Path, int] = {}
        self._seen_lock = Lock()

    async def run(self) -> None:
        logger.debug("Watching %s", self.review.settings.inbox)
        for path in self.review.iter_inbox():
            await self.queue.put(path)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._bootstrap_watchdog, loop)
        workers = self._start_workers()
        self.ready.set()
        try:
            while True:
                await asyncio.sleep(3600)
        except (asyncio.CancelledError, KeyboardInterrupt):
            logger.debug("Watcher stopping")
        finally:
            if self.observer:
                self.observer.stop()
                self.observer.join()
            await self._stop_workers(workers)

    def _bootstrap_watchdog(self, loop: asyncio.AbstractEventLoop) -> None:
        inbox = self.review.settings.inbox
        inbox.mkdir(parents=True, exist_ok=True)
        handler = InboxHandler(self.queue, INBOX_EXTENSIONS, loop=loop, close_events=self.close_events)
        observer = Observer()
        observer.schedule(handler, str(inbox), recursive=False)
        observer.start()
        self.observer = observer

    def _start_workers(self) -> list[asyncio.Task[None]]:
        concurrency = self.review.settings.worker_concurrency
        return [asyncio.create_task(self._worker(i)) for i in range(concurrency)]

    async def _stop_workers(self, workers: list[asyncio.Task[None]]) -> None:
        for worker in workers:
            worker.cancel()
        await asyncio.gather(*workers, return_exceptions=True)

    def should_process(self, path: Path) -> bool:
        try:
            mtime = path.stat().st_mtime_ns
        except OSError:
            with self._seen_lock:
                self._seen.pop(path, None)
            return False
        with self._seen_lock:
            if self._seen.get(path) == mtime:
                return False
            self._seen[path] = mtime
            if len(self._seen) > self.MAX_SEEN_PATHS:
                self._prune_seen()
        return True

    def _prune_seen(self) -> None:
        for seen in [p for p in self._seen if not p.exists()]:
            del self._seen[seen]

    def is_settled(self, path: Path) -> bool:
        """True when the file did not change during the settle interval."""
        before = _signature(path)
        time.sleep(self.review.settings.settle_seconds)
        return before is not None and before == _signature(path)

    async def _worker(self, worker_id: int) -> None:
        loop = asyncio.get_running_loop()
        while True:
            path = await self.queue.get()
            try:
                if self.should_process(path):
                    await loop.run_in_executor(
                        None,
                        functools.partial(self.review.process_file, path, is_final=self.is_settled),
                    )
            except Exception:  # pragma: no cover - logged and ignored
                logger.exception("Worker %s failed to process %s", worker_id, path)
            finally:
                self.queue.task_done()
