"""Classification of backend failure text."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple


class FailureClass(str, Enum):
    PRINTER_INIT_FAILED = "PrinterInitFailed"
    FILE_NOT_FOUND = "FileNotFound"
    ACCESS_DENIED = "AccessDenied"
    INVALID_PRINTER_NAME = "InvalidPrinterName"
    UNCLASSIFIED = "Unclassified"

    @property
    def retryable(self) -> bool:
        return self is FailureClass.PRINTER_INIT_FAILED


# Messages come from the Windows print tooling and are locale dependent.
_SIGNATURES: Tuple[Tuple[str, FailureClass], ...] = (
    ("unable to initialize device", FailureClass.PRINTER_INIT_FAILED),
    ("cannot find the file", FailureClass.FILE_NOT_FOUND),
    ("access is denied", FailureClass.ACCESS_DENIED),
    ("printer name is invalid", FailureClass.INVALID_PRINTER_NAME),
)


def classify_failure(error: Optional[str], output: Optional[str] = None) -> FailureClass:
    """Map raw error/output text of a failed attempt to a FailureClass."""
    text = f"{error or ''}\n{output or ''}".lower()
    for signature, failure_class in _SIGNATURES:
        if signature in text:
            return failure_class
    return FailureClass.UNCLASSIFIED
