"""Ordered fallback over printing backends."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .base_backend import BackendOutcome, PrintingBackend
from .errors import AllMethodsFailedError

logger = logging.getLogger(__name__)


class FallbackCascade:
    """Tries each backend in order until one reports success."""

    def __init__(self, backends: Sequence[PrintingBackend]):
        self.backends: List[PrintingBackend] = list(backends)

    @property
    def method_names(self) -> List[str]:
        return [backend.name for backend in self.backends]

    def run(self, file_path: str, printer_name: str) -> BackendOutcome:
        last_error: Optional[str] = None
        failures: List[BackendOutcome] = []
        for backend in self.backends:
            outcome = backend.attempt(file_path, printer_name)
            if outcome.success:
                logger.info(f"Printed to '{printer_name}' via {backend.name}")
                return outcome
            logger.warning(f"{backend.name} failed for '{printer_name}': {outcome.error}")
            failures.append(outcome)
            last_error = outcome.error
        raise AllMethodsFailedError(last_error, failures)
