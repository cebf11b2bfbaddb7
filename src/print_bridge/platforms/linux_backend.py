"""Linux lp print backend."""

from __future__ import annotations

from typing import List

from ..base_backend import BackendOutcome, PrintingBackend


class LinuxLpBackend(PrintingBackend):
    """Submits the file to CUPS with the lp command."""

    command = "lp"
    printer_flag = "-d"

    @property
    def name(self) -> str:
        return "linux-lp"

    def build_command(self, file_path: str, printer_name: str) -> List[str]:
        return [self.command, self.printer_flag, printer_name, file_path]

    def _attempt(self, file_path: str, printer_name: str) -> BackendOutcome:
        result = self._run(self.build_command(file_path, printer_name))
        # lp/lpr print harmless warnings (e.g. unknown options) on stderr
        if result.stderr and "Warning" not in result.stderr:
            return BackendOutcome.failed(
                self.name,
                printer_name,
                file_path,
                f"Print command failed: {result.stderr}",
                output=result.stdout,
            )
        if result.returncode != 0:
            return BackendOutcome.failed(
                self.name,
                printer_name,
                file_path,
                f"Print command failed: {self._exit_error(result)}",
                output=result.stdout,
            )
        return BackendOutcome.ok(self.name, printer_name, file_path, output=result.stdout)
