"""Printing backend contract and shared job models."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Union

from .errors import BackendFailureError, InvalidRequestError

logger = logging.getLogger(__name__)

# keeps console tools from flashing a window on Windows
_NO_WINDOW = getattr(subprocess, "CREATE_NO_WINDOW", 0)


@dataclass(slots=True)
class PrintJobRequest:
    """One inbound print job."""

    payload_encoded: str
    printer_name: str
    document_name: str = "document"

    @classmethod
    def from_message(cls, data: Dict[str, Any]) -> "PrintJobRequest":
        payload = data.get("base64String") or ""
        printer = data.get("printerName") or ""
        if not isinstance(payload, str) or not isinstance(printer, str):
            raise InvalidRequestError("base64String and printerName must be strings")
        document_name = data.get("documentName")
        return cls(
            payload_encoded=payload,
            printer_name=printer,
            document_name=document_name if isinstance(document_name, str) and document_name else "document",
        )

    def is_complete(self) -> bool:
        return bool(self.payload_encoded.strip()) and bool(self.printer_name.strip())


@dataclass(slots=True)
class MaterialFile:
    """Temporary on-disk copy of a job payload."""

    path: Path
    created_at: datetime = field(default_factory=datetime.now)


@dataclass(slots=True)
class BackendOutcome:
    """Result of one backend attempt."""

    success: bool
    method: str
    printer: str
    file: str
    output: str = ""
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.success:
            self.error = None

    @classmethod
    def ok(cls, method: str, printer: str, file: str, output: str = "") -> "BackendOutcome":
        return cls(success=True, method=method, printer=printer, file=file, output=output)

    @classmethod
    def failed(
        cls,
        method: str,
        printer: str,
        file: str,
        error: str,
        output: str = "",
    ) -> "BackendOutcome":
        return cls(
            success=False,
            method=method,
            printer=printer,
            file=file,
            output=output,
            error=error or f"{method} failed",
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "method": self.method,
            "printer": self.printer,
            "file": self.file,
            "output": self.output,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class DispatchOutcome:
    """Terminal result of one dispatched job."""

    success: bool
    message: Optional[str] = None
    result: Optional[BackendOutcome] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        if self.message is not None:
            data["message"] = self.message
        if self.result is not None:
            data["result"] = self.result.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class CommandResult:
    """Captured output of an external command."""

    returncode: int
    stdout: str
    stderr: str


class PrintingBackend(ABC):
    """Abstract base class for one OS-level way of printing a file."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier reported as the outcome's method."""

    def attempt(self, file_path: str, printer_name: str) -> BackendOutcome:
        """Try to print; every fault is reported as a failed outcome."""
        try:
            return self._attempt(str(file_path), printer_name)
        except BackendFailureError as exc:
            return exc.outcome
        except Exception as exc:
            logger.warning(f"{self.name} crashed: {exc}")
            return BackendOutcome.failed(self.name, printer_name, str(file_path), str(exc))

    @abstractmethod
    def _attempt(self, file_path: str, printer_name: str) -> BackendOutcome:
        """Backend-specific print attempt."""

    def _run(self, cmd: Union[str, List[str]]) -> CommandResult:
        line = cmd if isinstance(cmd, str) else subprocess.list2cmdline(cmd)
        logger.debug(f"{self.name}: {line}")
        proc = subprocess.run(cmd, capture_output=True, text=True, creationflags=_NO_WINDOW)
        return CommandResult(
            returncode=proc.returncode,
            stdout=(proc.stdout or "").strip(),
            stderr=(proc.stderr or "").strip(),
        )

    def _exit_error(self, result: CommandResult) -> str:
        return result.stderr or f"{self.name} exited with code {result.returncode}"

    def _fail(self, file_path: str, printer_name: str, error: str, output: str = "") -> NoReturn:
        """Abort the attempt with a failed outcome."""
        raise BackendFailureError(
            BackendOutcome.failed(self.name, printer_name, file_path, error, output=output)
        )
