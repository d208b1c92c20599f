"""Bounded in-memory log shown in the viewer, mirrored to :mod:`logging`."""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Tuple


class LogBuffer:
    def __init__(self, limit: int = 200, *, name: str = "barkwatch") -> None:
        self._lines: deque[str] = deque(maxlen=max(1, int(limit)))
        self._lock = threading.Lock()
        self._logger = logging.getLogger(name)
        self._pending: Optional[queue.SimpleQueue[Tuple[int, str]]] = None

    def add(self, message: str, level: int = logging.INFO) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        with self._lock:
            self._lines.append(f"[{stamp}] {message}")
            pending = self._pending
        if pending is not None:
            pending.put((level, message))
            return
        self._logger.log(level, message)

    def get(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def flush(self) -> int:
        """Hand deferred lines to :mod:`logging`; returns how many were emitted."""
        with self._lock:
            pending = self._pending
        return self._drain(pending) if pending is not None else 0

    @contextmanager
    def deferred(self) -> Iterator["LogBuffer"]:
        """Queue the :mod:`logging` side of :meth:`add` until :meth:`flush`.

        Lines still land in the buffer immediately. Used while an audio
        callback may log, so handler I/O stays on the thread that flushes.
        """
        pending: queue.SimpleQueue[Tuple[int, str]] = queue.SimpleQueue()
        with self._lock:
            self._pending = pending
        try:
            yield self
        finally:
            with self._lock:
                self._pending = None
            self._drain(pending)

    def _drain(self, pending: queue.SimpleQueue[Tuple[int, str]]) -> int:
        emitted = 0
        while True:
            try:
                level, message = pending.get_nowait()
            except queue.Empty:
                return emitted
            self._logger.log(level, message)
            emitted += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)
