"""Printer enumeration through the OS command-line tools."""

from __future__ import annotations

import logging
import platform
import subprocess
from typing import List, Optional

logger = logging.getLogger(__name__)


def _parse_wmic(stdout: str) -> List[str]:
    names = []
    for line in stdout.splitlines():
        name = line.strip()
        if not name or "Name" in name:
            continue
        names.append(name)
    return names


def _parse_lpstat(stdout: str) -> List[str]:
    # sample: "printer HP_LaserJet is idle.  enabled since ..."
    names = []
    for line in stdout.splitlines():
        if not line.startswith("printer"):
            continue
        parts = line.split()
        if len(parts) > 1:
            names.append(parts[1])
    return names


class PrinterInventory:
    """Lists printer names known to the OS; an empty list means none known."""

    def __init__(self, system: Optional[str] = None):
        self.system = (system or platform.system()).lower()

    def list_printers(self) -> List[str]:
        if self.system == "windows":
            cmd, parse = ["wmic", "printer", "get", "name"], _parse_wmic
        else:
            cmd, parse = ["lpstat", "-p"], _parse_lpstat
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=True)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.error(f"Error getting printers: {exc}")
            return []
        return parse(proc.stdout or "")
