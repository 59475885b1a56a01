"""Watch a directory tree and report CSV files created, changed or deleted."""

from __future__ import annotations

from dataclasses import dataclass
import fnmatch
from pathlib import Path
import threading
import time
from typing import Any, Callable, Literal

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

ChangeKind = Literal["created", "changed", "deleted"]

_SKIPPED_DIRS = frozenset({".git", "__pycache__", "node_modules", ".venv"})


@dataclass(frozen=True, slots=True)
class FileChange:
    path: Path
    kind: ChangeKind

    def to_dict(self) -> dict[str, str]:
        return {"path": str(self.path), "kind": self.kind}


class CsvChangeHandler(FileSystemEventHandler):
    """Collects CSV file events and hands them out once they settle.

    Editors often write a file in several steps, so events for one path are
    coalesced and only released by `drain()` after `debounce_seconds` of quiet.
    """

    def __init__(
        self,
        pattern: str = "*.csv",
        *,
        debounce_seconds: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.pattern = pattern
        self.debounce_seconds = debounce_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._pending: dict[Path, tuple[ChangeKind, float]] = {}

    def should_track(self, path: str | Path) -> bool:
        candidate = Path(path)
        if any(part in _SKIPPED_DIRS for part in candidate.parts):
            return False
        return fnmatch.fnmatch(candidate.name.lower(), self.pattern.lower())

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, "created")

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, "changed")

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, "deleted")

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._record(event.src_path, "deleted")
        self._record(event.dest_path, "created")

    def drain(self) -> list[FileChange]:
        """Settled changes sorted by path; unsettled ones stay pending."""
        now = self._clock()
        ready: list[FileChange] = []
        with self._lock:
            for path, (kind, seen_at) in list(self._pending.items()):
                if now - seen_at < self.debounce_seconds:
                    continue
                del self._pending[path]
                ready.append(FileChange(path=path, kind=kind))
        return sorted(ready, key=lambda change: change.path)

    def _record(self, raw_path: str | bytes, kind: ChangeKind) -> None:
        if isinstance(raw_path, bytes):
            raw_path = raw_path.decode()
        if not self.should_track(raw_path):
            return

        path = Path(raw_path)
        with self._lock:
            previous = self._pending.get(path)
            merged = _merge_kinds(previous[0], kind) if previous else kind
            if merged is None:
                del self._pending[path]
                return
            self._pending[path] = (merged, self._clock())


def _merge_kinds(previous: ChangeKind, current: ChangeKind) -> ChangeKind | None:
    # A file created and deleted between drains never existed for the caller.
    if previous == "created" and current == "deleted":
        return None
    if previous == "created":
        return "created"
    if previous == "deleted" and current == "created":
        return "changed"
    return current


def watch(
    root: str | Path,
    callback: Callable[[list[FileChange]], None],
    *,
    pattern: str = "*.csv",
    interval: float = 1.0,
    debounce_seconds: float = 0.5,
    max_polls: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
    observer_factory: Callable[[], Any] = Observer,
) -> int:
    """Watch `root` recursively until interrupted (or `max_polls`).

    Every `interval` seconds the settled changes are passed to `callback`.
    Returns the number of polls performed.
    """
    handler = CsvChangeHandler(pattern, debounce_seconds=debounce_seconds)
    observer = observer_factory()
    observer.schedule(handler, str(root), recursive=True)
    observer.start()
    polls = 0
    try:
        while max_polls is None or polls < max_polls:
            sleep(interval)
            polls += 1
            changes = handler.drain()
            if changes:
                callback(changes)
    finally:
        observer.stop()
        observer.join()
    return polls
