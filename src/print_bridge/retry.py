"""Bounded retries with print spooler recovery."""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Callable, List, Optional

from .base_backend import BackendOutcome, PrintingBackend
from .errors import RetriesExhaustedError
from .failure import FailureClass, classify_failure

logger = logging.getLogger(__name__)

Sleep = Callable[[float], None]


class SpoolerRecovery:
    """Restarts the Windows print spooler service.

    Slow (about five seconds) and disruptive to every queued job on the host,
    so only the retry policy calls it, and only for a printer init failure.
    """

    def __init__(
        self,
        stop_wait: float = 2.0,
        start_wait: float = 3.0,
        sleep: Sleep = time.sleep,
        service_name: str = "spooler",
    ):
        self.stop_wait = stop_wait
        self.start_wait = start_wait
        self.service_name = service_name
        self._sleep = sleep

    def _net(self, action: str) -> bool:
        cmd: List[str] = ["net", action, self.service_name]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as exc:
            logger.error(f"net {action} {self.service_name} could not run: {exc}")
            return False
        if proc.returncode != 0:
            logger.error(
                f"net {action} {self.service_name} failed: {(proc.stderr or proc.stdout).strip()}"
            )
            return False
        return True

    def reset(self) -> bool:
        logger.warning("Restarting print spooler")
        stopped = self._net("stop")
        self._sleep(self.stop_wait)
        started = self._net("start")
        self._sleep(self.start_wait)
        return stopped and started


class RetryPolicy:
    """Runs one designated backend, recovering the spooler on init failures."""

    def __init__(
        self,
        backend: PrintingBackend,
        recovery: Optional[SpoolerRecovery] = None,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        sleep: Sleep = time.sleep,
    ):
        self.backend = backend
        self.recovery = recovery or SpoolerRecovery(sleep=sleep)
        self.max_attempts = max(1, int(max_attempts))
        self.retry_delay = retry_delay
        self._sleep = sleep

    def run_with_retry(
        self,
        file_path: str,
        printer_name: str,
        max_attempts: Optional[int] = None,
    ) -> BackendOutcome:
        attempts_allowed = max(1, int(max_attempts or self.max_attempts))
        last_error: Optional[str] = None
        failure_class = FailureClass.UNCLASSIFIED

        for attempt in range(1, attempts_allowed + 1):
            outcome = self.backend.attempt(file_path, printer_name)
            if outcome.success:
                if attempt > 1:
                    logger.info(f"Print to '{printer_name}' succeeded on attempt {attempt}")
                return outcome

            last_error = outcome.error
            failure_class = classify_failure(outcome.error, outcome.output)
            logger.warning(
                f"Attempt {attempt}/{attempts_allowed} to '{printer_name}' failed "
                f"({failure_class.value}): {outcome.error}"
            )
            if not failure_class.retryable:
                raise RetriesExhaustedError(last_error, attempt, failure_class)
            if attempt < attempts_allowed:
                self.recovery.reset()
                self._sleep(self.retry_delay)

        raise RetriesExhaustedError(last_error, attempts_allowed, failure_class)
