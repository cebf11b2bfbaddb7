"""Windows print backends built on the stock command-line tools."""

from __future__ import annotations

from ..base_backend import BackendOutcome, PrintingBackend
from ..failure import FailureClass, classify_failure


def _ps_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class WindowsPrintCommandBackend(PrintingBackend):
    """PRINT.EXE; its stderr is the only failure signal worth reading."""

    @property
    def name(self) -> str:
        return "windows-print-command"

    def _attempt(self, file_path: str, printer_name: str) -> BackendOutcome:
        result = self._run(f'print /D:"{printer_name}" "{file_path}"')

        failure_class = classify_failure(result.stderr)
        if failure_class is FailureClass.PRINTER_INIT_FAILED:
            return BackendOutcome.failed(
                self.name,
                printer_name,
                file_path,
                "Printer initialization failed",
                output=result.stderr,
            )
        if failure_class is not FailureClass.UNCLASSIFIED:
            return BackendOutcome.failed(
                self.name,
                printer_name,
                file_path,
                f"Print error: {result.stderr}",
                output=result.stderr,
            )
        if result.returncode != 0:
            return BackendOutcome.failed(
                self.name, printer_name, file_path, self._exit_error(result), output=result.stdout
            )
        return BackendOutcome.ok(
            self.name, printer_name, file_path, output=result.stdout or result.stderr
        )


class PowerShellReaderBackend(PrintingBackend):
    """Starts a PDF reader hidden through PowerShell and waits for it."""

    def __init__(self, reader_path: str = "Acrobat.exe"):
        self.reader_path = reader_path

    @property
    def name(self) -> str:
        return "powershell-print"

    def _attempt(self, file_path: str, printer_name: str) -> BackendOutcome:
        arguments = f'/t "{file_path}" "{printer_name}"'
        script = (
            f"Start-Process -FilePath {_ps_quote(self.reader_path)} "
            f"-ArgumentList {_ps_quote(arguments)} -WindowStyle Hidden -Wait"
        )
        result = self._run(["powershell", "-NoProfile", "-NonInteractive", "-Command", script])
        if result.returncode != 0:
            return BackendOutcome.failed(
                self.name, printer_name, file_path, self._exit_error(result), output=result.stdout
            )
        return BackendOutcome.ok(self.name, printer_name, file_path, output=result.stdout)


class Rundll32ShellPrintBackend(PrintingBackend):
    """Shell "printto" verb via rundll32; may flash the associated viewer."""

    @property
    def name(self) -> str:
        return "rundll32-print"

    def _attempt(self, file_path: str, printer_name: str) -> BackendOutcome:
        result = self._run(
            f'rundll32.exe shell32.dll,ShellExec_RunDLL "{file_path}" /p /n"{printer_name}"'
        )
        if result.returncode != 0:
            return BackendOutcome.failed(
                self.name, printer_name, file_path, self._exit_error(result), output=result.stdout
            )
        return BackendOutcome.ok(self.name, printer_name, file_path, output=result.stdout)
