"""Console progress reporting."""

from __future__ import annotations

import sys
import threading
from typing import Optional, TextIO

from counting.base import ProgressObserver
from counting.models import CountNode, flatten

CLEAR_LINE = "\r\x1b[2K"


class ConsoleProgress(ProgressObserver):
    """Single-line progress on a terminal stream.

    Uses ANSI clear-line sequences, so output may look odd on terminals that
    do not understand them. Safe to call from worker threads.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream if stream is not None else sys.stderr
        self._lock = threading.Lock()
        self.total = 0
        self.done = 0

    def _write(self, text: str, clear: bool = True) -> None:
        if clear:
            self._stream.write(CLEAR_LINE)
        self._stream.write(text)
        self._stream.flush()

    def on_start_resolve(self) -> None:
        with self._lock:
            self._write("Computing transitive dependencies...", clear=False)

    def on_dependencies_resolved(self, root: CountNode) -> None:
        total = len(flatten(root))
        with self._lock:
            self.total = total
            self.done = 0
            self._write(f"Counting 0 / {total}...")

    def on_dependency_counted(self, node: CountNode) -> None:
        with self._lock:
            self.done += 1
            self._write(f"Counting {self.done} / {self.total}...")

    def on_done(self, root: CountNode) -> None:
        with self._lock:
            self._write("")

    def on_error(self, error: Exception) -> None:
        with self._lock:
            self._write("")


class NullProgress(ProgressObserver):
    """Observer for quiet mode."""
