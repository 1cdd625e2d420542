"""
genreport/watch.py

Directory watcher that hands newly arrived reports to the pipeline.

A watchdog `Observer` monitors the input folder (non-recursively). `.xml`
files are passed to a callback on the observer's dispatch thread, so files
are processed one at a time in arrival order. Result documents
(`*-Result.xml`) are ignored in case the input and output folders are the
same.

Notes
-----
- On Linux (inotify) a created file is only dispatched once the writer
  closes it, so a report still being copied in is never read half-written.
- Other platforms emit no close events; there a file is dispatched as soon
  as it is created, and a copy that is still in progress may fail to parse.
  Moving a finished file into the folder avoids this everywhere.
- A file moved into the folder is dispatched immediately.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .write import RESULT_SUFFIX

logger = logging.getLogger(__name__)

INPUT_PATTERN = "*.xml"

# Only the inotify backend reports files closed after writing.
CLOSE_EVENTS = sys.platform.startswith("linux")


def is_report(path: str | Path) -> bool:
    """True for `.xml` files that are not result documents."""
    path = Path(path)
    return path.suffix.lower() == ".xml" and not path.stem.endswith(RESULT_SUFFIX)


class ReportFileHandler(FileSystemEventHandler):
    """Forward new report files to `callback`.

    Args:
        callback: Invoked with the path of each new report.
        close_events: Wait for the close-after-write of a created file
            instead of dispatching it on creation.
    """

    def __init__(self, callback: Callable[[Path], object], close_events: bool = CLOSE_EVENTS):
        self.callback = callback
        self.close_events = close_events
        self._pending: set[str] = set()

    def _dispatch_path(self, path: str) -> None:
        logger.info("Detected new file: %s", path)
        self.callback(Path(path))

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory or not is_report(event.src_path):
            return
        if self.close_events:
            self._pending.add(event.src_path)
        else:
            self._dispatch_path(event.src_path)

    def on_closed(self, event: FileSystemEvent) -> None:
        # Closes of files that were not created while watching are edits.
        if event.src_path in self._pending:
            self._pending.discard(event.src_path)
            self._dispatch_path(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory and is_report(event.dest_path):
            self._pending.discard(event.dest_path)
            self._dispatch_path(event.dest_path)


def watch(
    input_dir: str | Path,
    callback: Callable[[Path], object],
    poll_interval: float = 1.0,
) -> bool:
    """Watch `input_dir` until interrupted, calling `callback` per new report.

    Blocks the calling thread. The observer is always stopped and joined
    before returning.

    Args:
        input_dir: Folder to monitor.
        callback: Invoked with the path of each new report.
        poll_interval: Seconds between liveness checks of the observer.

    Returns:
        bool: True when stopped by `KeyboardInterrupt`, False if the observer
        thread died on its own (e.g. an exception escaped `callback`).
    """
    observer = Observer()
    observer.schedule(ReportFileHandler(callback), str(input_dir), recursive=False)
    observer.start()
    logger.info("Monitoring %s for %s files...", input_dir, INPUT_PATTERN)

    try:
        while observer.is_alive():
            observer.join(poll_interval)
    except KeyboardInterrupt:
        logger.info("Stopping watcher")
        return True
    finally:
        observer.stop()
        observer.join()

    logger.error("Watcher for %s stopped unexpectedly", input_dir)
    return False
