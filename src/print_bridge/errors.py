"""Print bridge exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .base_backend import BackendOutcome
    from .failure import FailureClass


class PrintingError(RuntimeError):
    """Base error for the print dispatch engine."""


class InvalidRequestError(PrintingError):
    """Raised when a print request is missing its payload or printer."""


class PayloadDecodeError(PrintingError):
    """Raised when a document payload cannot be decoded."""


class BackendFailureError(PrintingError):
    """A single backend attempt failed."""

    def __init__(self, outcome: "BackendOutcome"):
        super().__init__(outcome.error or f"{outcome.method} failed")
        self.outcome = outcome


class AllMethodsFailedError(PrintingError):
    """Raised when every backend in a cascade reported failure."""

    def __init__(self, last_error: Optional[str], failures: Optional[List["BackendOutcome"]] = None):
        self.last_error = last_error or "no printing backend available"
        self.failures = list(failures or [])
        super().__init__(f"All printing methods failed. Last error: {self.last_error}")


class RetriesExhaustedError(PrintingError):
    """Raised when the retry policy gives up without a successful attempt."""

    def __init__(self, last_error: Optional[str], attempts: int, failure_class: "FailureClass"):
        self.last_error = last_error or "unknown error"
        self.attempts = attempts
        self.failure_class = failure_class
        super().__init__(
            f"Print failed after {attempts} attempt(s). Last error: {self.last_error}"
        )


class CleanupFailureError(PrintingError):
    """Deferred deletion of a material file failed. Logged, never surfaced."""


class RenderingError(PrintingError):
    """Raised when a material file cannot be loaded or rasterized."""
