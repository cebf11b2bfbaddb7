"""Deferred deletion of material files."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Union

from .errors import CleanupFailureError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def delete_material_file(path: PathLike) -> bool:
    """Delete a material file. Missing files are fine; other errors are logged.

    Returns True when nothing is left on disk.
    """
    try:
        Path(path).unlink(missing_ok=True)
        return True
    except OSError as exc:
        failure = CleanupFailureError(f"Cleanup failed for {path}: {exc}")
        logger.error(str(failure))
        return False


class CleanupScheduler:
    """Runs file deletions after a grace delay; pending ones are flushed on shutdown."""

    def __init__(self, default_delay: float = 5.0):
        self.default_delay = max(0.0, float(default_delay))
        self._timers: Dict[int, threading.Timer] = {}
        self._lock = threading.Lock()
        self._next_id = 0
        self._closed = False

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._timers)

    def schedule(self, path: PathLike, delay: float | None = None) -> None:
        delay = self.default_delay if delay is None else max(0.0, float(delay))
        with self._lock:
            if not self._closed:
                timer_id = self._next_id
                self._next_id += 1
                timer = threading.Timer(delay, self._fire, args=(timer_id, path))
                timer.daemon = True
                self._timers[timer_id] = timer
                timer.start()
                return
        # already shut down
        delete_material_file(path)

    def _fire(self, timer_id: int, path: PathLike) -> None:
        with self._lock:
            if self._timers.pop(timer_id, None) is None:
                return
        delete_material_file(path)

    def shutdown(self, flush: bool = True) -> None:
        with self._lock:
            self._closed = True
            pending = list(self._timers.values())
            self._timers.clear()
        for timer in pending:
            timer.cancel()
            if flush:
                delete_material_file(timer.args[1])
        if pending:
            logger.info(f"Cancelled {len(pending)} pending cleanup(s)")
