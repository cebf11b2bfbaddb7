"""Job dispatcher and per-platform backend factory."""

from __future__ import annotations

import logging
import platform
from typing import Any, Dict, List, Optional

from .base_backend import DispatchOutcome, MaterialFile, PrintJobRequest, PrintingBackend
from .cascade import FallbackCascade
from .context import BridgeConfig, BridgeContext
from .errors import (
    AllMethodsFailedError,
    InvalidRequestError,
    PayloadDecodeError,
    PrintingError,
    RetriesExhaustedError,
)
from .materializer import PayloadMaterializer
from .platforms.linux_backend import LinuxLpBackend
from .platforms.mac_backend import MacLprBackend
from .platforms.win_backends import (
    PowerShellReaderBackend,
    Rundll32ShellPrintBackend,
    WindowsPrintCommandBackend,
)
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Print job sent successfully"
MISSING_FIELDS_MESSAGE = "base64String and printerName are required"

_ERROR_CODES = {
    InvalidRequestError: "invalid_request",
    PayloadDecodeError: "decode_error",
    AllMethodsFailedError: "all_methods_failed",
    RetriesExhaustedError: "retries_exhausted",
}


def get_printing_backends(config: BridgeConfig, system: Optional[str] = None) -> List[PrintingBackend]:
    """Backends for the host platform, least disruptive first."""
    system = (system or platform.system()).lower()
    if system == "windows":
        # Qt pulls in the GUI stack, so only Windows imports it.
        from .qt_bridge import QtRenderPrintBackend

        return [
            QtRenderPrintBackend(settle_delay=config.render_settle_delay, dpi=config.render_dpi),
            PowerShellReaderBackend(config.pdf_reader_path),
            Rundll32ShellPrintBackend(),
            WindowsPrintCommandBackend(),
        ]
    if system == "darwin":
        return [MacLprBackend()]
    return [LinuxLpBackend()]


def get_retry_policy(config: BridgeConfig, system: Optional[str] = None) -> Optional[RetryPolicy]:
    """Spooler recovery only exists on Windows."""
    system = (system or platform.system()).lower()
    if system != "windows":
        return None
    return RetryPolicy(
        WindowsPrintCommandBackend(),
        max_attempts=config.max_attempts,
        retry_delay=config.retry_delay,
    )


class JobDispatcher:
    """Turns one print request into exactly one DispatchOutcome."""

    def __init__(
        self,
        context: BridgeContext,
        cascade: Optional[FallbackCascade] = None,
        retry_policy: Optional[RetryPolicy] = None,
        materializer: Optional[PayloadMaterializer] = None,
    ):
        self.context = context.start()
        self.cascade = cascade or FallbackCascade(get_printing_backends(context.config))
        self.retry_policy = retry_policy
        self.materializer = materializer or PayloadMaterializer(context.temp_dir)

    @classmethod
    def for_platform(cls, context: BridgeContext) -> "JobDispatcher":
        return cls(context, retry_policy=get_retry_policy(context.config))

    def dispatch_message(self, data: Dict[str, Any]) -> DispatchOutcome:
        try:
            request = PrintJobRequest.from_message(data)
        except InvalidRequestError as exc:
            logger.warning(f"Print job error: {exc}")
            return DispatchOutcome(success=False, error=str(exc), error_code="invalid_request")
        return self.dispatch(request)

    def dispatch(self, request: PrintJobRequest) -> DispatchOutcome:
        material: Optional[MaterialFile] = None
        try:
            if not request.is_complete():
                raise InvalidRequestError(MISSING_FIELDS_MESSAGE)

            printer_name = request.printer_name.strip()
            logger.info(f"Print job received: {request.document_name} to {printer_name}")
            material = self.materializer.materialize(request.payload_encoded, request.document_name)

            if self.retry_policy is not None and self.context.is_recovery_printer(printer_name):
                result = self.retry_policy.run_with_retry(
                    str(material.path), printer_name, self.context.config.max_attempts
                )
            else:
                result = self.cascade.run(str(material.path), printer_name)
            return DispatchOutcome(success=True, message=SUCCESS_MESSAGE, result=result)
        except PrintingError as exc:
            log = logger.warning if isinstance(exc, InvalidRequestError) else logger.error
            log(f"Print job error: {exc}")
            return DispatchOutcome(
                success=False,
                error=str(exc),
                error_code=_ERROR_CODES.get(type(exc), "printing_error"),
            )
        except Exception as exc:
            logger.exception(f"Unexpected print job error: {exc}")
            return DispatchOutcome(success=False, error=str(exc), error_code="unexpected")
        finally:
            if material is not None:
                self.context.cleanup.schedule(material.path)
