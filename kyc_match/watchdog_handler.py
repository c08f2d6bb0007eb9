from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler

logger = logging.getLogger(__name__)


def platform_reports_close() -> bool:
    """Only the inotify backend emits close-after-write events."""
    return sys.platform.startswith("linux")


class InboxHandler(FileSystemEventHandler):
    """
    Queues upload responses dropped into the inbox.

    Where the backend reports close-after-write, a file is queued only once
    its writer has closed it, so half-written JSON never reaches the
    reviewer. Elsewhere created/modified events are used and the watcher
    must cope with partial files.
    """

    def __init__(
        self,
        queue: asyncio.Queue[Path],
        exts: Iterable[str],
        *,
        loop: asyncio.AbstractEventLoop,
        close_events: Optional[bool] = None,
    ) -> None:
        super().__init__()
        self.queue = queue
        self.exts = {ext.lower() for ext in exts}
        self.loop = loop
        self.close_events = platform_reports_close() if close_events is None else close_events

    def on_created(self, event: FileSystemEvent) -> None:
        if not self.close_events:
            self._maybe_enqueue(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not self.close_events:
            self._maybe_enqueue(event)

    def on_closed(self, event: FileSystemEvent) -> None:
        self._maybe_enqueue(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Atomic writers rename a finished temp file into the inbox
        dest = getattr(event, "dest_path", None)
        if dest and not event.is_directory:
            self._enqueue_path(dest)

    def _maybe_enqueue(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._enqueue_path(event.src_path)

    def _enqueue_path(self, src: str | bytes) -> None:
        if isinstance(src, bytes):
            src = src.decode("utf-8", errors="replace")
        path = Path(src)
        if path.suffix.lower() in self.exts:
            logger.debug("Queued upload response: %s", path)
            self.loop.call_soon_threadsafe(self.queue.put_nowait, path)
