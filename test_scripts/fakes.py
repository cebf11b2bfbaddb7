"""Scripted stand-ins for backends and spooler recovery."""

from __future__ import annotations

import subprocess
import sys
import threading
from pathlib import Path
from typing import List, Optional, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.print_bridge.base_backend import BackendOutcome, PrintingBackend


class ScriptedBackend(PrintingBackend):
    """Replays a list of (success, error, output) results, repeating the last one."""

    def __init__(self, name: str, script: Sequence[tuple]):
        self._name = name
        self.script = list(script)
        self.calls: List[tuple] = []

    @property
    def name(self) -> str:
        return self._name

    def _attempt(self, file_path: str, printer_name: str) -> BackendOutcome:
        self.calls.append((file_path, printer_name))
        index = min(len(self.calls), len(self.script)) - 1
        success, error, output = self.script[index]
        if success:
            return BackendOutcome.ok(self.name, printer_name, file_path, output=output)
        return BackendOutcome.failed(self.name, printer_name, file_path, error, output=output)


def succeeding(name: str, output: str = "ok") -> ScriptedBackend:
    return ScriptedBackend(name, [(True, None, output)])


def failing(name: str, error: str, output: str = "") -> ScriptedBackend:
    return ScriptedBackend(name, [(False, error, output)])


class CrashingBackend(PrintingBackend):
    @property
    def name(self) -> str:
        return "crashing"

    def _attempt(self, file_path: str, printer_name: str) -> BackendOutcome:
        raise FileNotFoundError("helper executable missing")


class BlockingBackend(PrintingBackend):
    """Holds every attempt until release is set, like a hung print command."""

    def __init__(self, release: threading.Event, timeout: float = 10.0):
        self.release = release
        self.timeout = timeout
        self.started = threading.Event()

    @property
    def name(self) -> str:
        return "blocking"

    def _attempt(self, file_path: str, printer_name: str) -> BackendOutcome:
        self.started.set()
        self.release.wait(self.timeout)
        return BackendOutcome.ok(self.name, printer_name, file_path)


class CountingRecovery:
    def __init__(self, result: bool = True):
        self.resets = 0
        self.result = result

    def reset(self) -> bool:
        self.resets += 1
        return self.result


class NoSleep:
    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeCompleted:
    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = ""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class FakeRun:
    """Records subprocess.run calls and answers with a fixed FakeCompleted."""

    def __init__(self, result: Optional[FakeCompleted] = None, exc: Optional[BaseException] = None):
        self.result = result or FakeCompleted()
        self.exc = exc
        self.calls: list = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        if self.exc is not None:
            raise self.exc
        if kwargs.get("check") and self.result.returncode != 0:
            raise subprocess.CalledProcessError(self.result.returncode, cmd)
        return self.result
