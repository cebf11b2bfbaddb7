"""Print dispatch engine entrypoints."""

from .base_backend import (
    BackendOutcome,
    DispatchOutcome,
    MaterialFile,
    PrintJobRequest,
    PrintingBackend,
)
from .cascade import FallbackCascade
from .cleanup import CleanupScheduler, delete_material_file
from .context import BridgeConfig, BridgeContext
from .dispatcher import JobDispatcher, get_printing_backends, get_retry_policy
from .errors import (
    AllMethodsFailedError,
    BackendFailureError,
    CleanupFailureError,
    InvalidRequestError,
    PayloadDecodeError,
    PrintingError,
    RenderingError,
    RetriesExhaustedError,
)
from .failure import FailureClass, classify_failure
from .inventory import PrinterInventory
from .materializer import PayloadMaterializer
from .retry import RetryPolicy, SpoolerRecovery

__all__ = [
    "BackendOutcome",
    "BridgeConfig",
    "BridgeContext",
    "CleanupScheduler",
    "DispatchOutcome",
    "FailureClass",
    "FallbackCascade",
    "JobDispatcher",
    "MaterialFile",
    "PayloadMaterializer",
    "PrintJobRequest",
    "PrinterInventory",
    "PrintingBackend",
    "RetryPolicy",
    "SpoolerRecovery",
    "classify_failure",
    "delete_material_file",
    "get_printing_backends",
    "get_retry_policy",
    "PrintingError",
    "InvalidRequestError",
    "PayloadDecodeError",
    "BackendFailureError",
    "AllMethodsFailedError",
    "RetriesExhaustedError",
    "CleanupFailureError",
    "RenderingError",
]
