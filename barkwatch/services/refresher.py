"""Background catalog scans; the most recently requested scan wins."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List

from ..audio.types import AudioEvent
from ..store.catalog import RecordingCatalog
from .logger import LogBuffer


class CatalogRefresher:
    def __init__(
        self,
        catalog: RecordingCatalog,
        on_result: Callable[[List[AudioEvent]], None],
        logger: LogBuffer,
    ) -> None:
        self.catalog = catalog
        self.on_result = on_result
        self.logger = logger
        self._lock = threading.Lock()
        self._generation = 0

    def refresh(self) -> threading.Thread:
        with self._lock:
            self._generation += 1
            generation = self._generation
        thread = threading.Thread(target=self._run, args=(generation,), daemon=True)
        thread.start()
        return thread

    def _run(self, generation: int) -> None:
        self.logger.add(f"Scanning {self.catalog.root}...")
        try:
            events = self.catalog.scan()
        except OSError as exc:
            self.logger.add(f"Scan of {self.catalog.root} failed: {exc}", logging.ERROR)
            return
        with self._lock:
            if generation != self._generation:
                self.logger.add("Discarding superseded scan", logging.DEBUG)
                return
            self.on_result(events)
        self.logger.add(f"Loaded {len(events)} recording(s)")
