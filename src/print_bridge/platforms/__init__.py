"""Platform-specific printing backends."""

from .linux_backend import LinuxLpBackend
from .mac_backend import MacLprBackend
from .win_backends import (
    PowerShellReaderBackend,
    Rundll32ShellPrintBackend,
    WindowsPrintCommandBackend,
)

__all__ = [
    "LinuxLpBackend",
    "MacLprBackend",
    "PowerShellReaderBackend",
    "Rundll32ShellPrintBackend",
    "WindowsPrintCommandBackend",
]
