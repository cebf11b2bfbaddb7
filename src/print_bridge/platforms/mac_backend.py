"""macOS lpr print backend."""

from __future__ import annotations

from .linux_backend import LinuxLpBackend


class MacLprBackend(LinuxLpBackend):
    """macOS shares the CUPS command behavior; only the command differs."""

    command = "lpr"
    printer_flag = "-P"

    @property
    def name(self) -> str:
        return "macos-lpr"
