# -*- coding: utf-8 -*-
"""Job dispatcher orchestration."""

from __future__ import annotations

from pathlib import Path

import pytest

from fakes import CountingRecovery, NoSleep, ScriptedBackend, failing, succeeding
from src.print_bridge.base_backend import PrintJobRequest
from src.print_bridge.cascade import FallbackCascade
from src.print_bridge.context import BridgeConfig, BridgeContext
from src.print_bridge.dispatcher import JobDispatcher, get_printing_backends, get_retry_policy
from src.print_bridge.platforms import LinuxLpBackend, MacLprBackend
from src.print_bridge.retry import RetryPolicy

PAYLOAD = "data:application/pdf;base64,JVBERi0xLjQK"


def _context(tmp_path: Path) -> BridgeContext:
    return BridgeContext(BridgeConfig(temp_dir=str(tmp_path / "jobs"), cleanup_delay=60.0))


def test_dispatch_success_materializes_sanitized_file(tmp_path) -> None:
    backend = succeeding("render")
    context = _context(tmp_path)
    dispatcher = JobDispatcher(context, cascade=FallbackCascade([backend]))

    outcome = dispatcher.dispatch(PrintJobRequest(PAYLOAD, "Printer1", "Invoice #42"))

    assert outcome.success is True
    assert outcome.message == "Print job sent successfully"
    assert outcome.result is not None and outcome.result.printer == "Printer1"
    file_path = Path(backend.calls[0][0])
    assert file_path.parent == context.temp_dir
    assert "Invoice_42" in file_path.name
    assert file_path.read_bytes() == b"%PDF-1.4\n"
    assert context.cleanup.pending_count == 1

    context.shutdown()
    assert not file_path.exists()


@pytest.mark.parametrize(
    "payload,printer",
    [("", "Printer1"), (PAYLOAD, ""), ("   ", "Printer1"), (PAYLOAD, "  ")],
)
def test_missing_fields_rejected_without_backend(tmp_path, payload: str, printer: str) -> None:
    backend = succeeding("render")
    context = _context(tmp_path)
    dispatcher = JobDispatcher(context, cascade=FallbackCascade([backend]))

    outcome = dispatcher.dispatch(PrintJobRequest(payload, printer))

    assert outcome.success is False
    assert outcome.error == "base64String and printerName are required"
    assert outcome.error_code == "invalid_request"
    assert backend.calls == []
    assert context.cleanup.pending_count == 0


def test_decode_error_is_a_failed_outcome(tmp_path) -> None:
    backend = succeeding("render")
    context = _context(tmp_path)
    dispatcher = JobDispatcher(context, cascade=FallbackCascade([backend]))

    outcome = dispatcher.dispatch(PrintJobRequest("%%%not-base64%%%", "Printer1"))

    assert outcome.success is False
    assert outcome.error_code == "decode_error"
    assert backend.calls == []
    assert list(context.temp_dir.iterdir()) == []


def test_cascade_exhaustion_still_schedules_cleanup(tmp_path) -> None:
    context = _context(tmp_path)
    dispatcher = JobDispatcher(
        context,
        cascade=FallbackCascade([failing("render", "nope"), failing("print-command", "still nope")]),
    )

    outcome = dispatcher.dispatch(PrintJobRequest(PAYLOAD, "Printer1"))

    assert outcome.success is False
    assert outcome.error == "All printing methods failed. Last error: still nope"
    assert outcome.error_code == "all_methods_failed"
    assert outcome.to_dict() == {"success": False, "error": outcome.error}
    assert context.cleanup.pending_count == 1
    context.shutdown()


def test_recovery_printer_uses_retry_policy(tmp_path) -> None:
    cascade_backend = succeeding("render")
    designated = ScriptedBackend(
        "windows-print-command",
        [(False, "Printer initialization failed", "Unable to initialize device"), (True, None, "done")],
    )
    recovery = CountingRecovery()
    policy = RetryPolicy(designated, recovery=recovery, sleep=NoSleep())
    context = _context(tmp_path)
    dispatcher = JobDispatcher(context, cascade=FallbackCascade([cascade_backend]), retry_policy=policy)

    outcome = dispatcher.dispatch(PrintJobRequest(PAYLOAD, "Microsoft Print to PDF"))

    assert outcome.success is True
    assert outcome.result.method == "windows-print-command"
    assert recovery.resets == 1
    assert cascade_backend.calls == []

    other = dispatcher.dispatch(PrintJobRequest(PAYLOAD, "Office Laser"))
    assert other.result.method == "render"
    context.shutdown()


def test_retry_exhaustion_is_a_failed_outcome(tmp_path) -> None:
    designated = ScriptedBackend("windows-print-command", [(False, "Print error: Access is denied.", "")])
    policy = RetryPolicy(designated, recovery=CountingRecovery(), sleep=NoSleep())
    context = _context(tmp_path)
    dispatcher = JobDispatcher(context, cascade=FallbackCascade([]), retry_policy=policy)

    outcome = dispatcher.dispatch(PrintJobRequest(PAYLOAD, "Microsoft Print to PDF"))

    assert outcome.success is False
    assert outcome.error_code == "retries_exhausted"
    assert "Access is denied" in outcome.error
    context.shutdown()


def test_unexpected_error_does_not_escape(tmp_path) -> None:
    class BrokenCascade(FallbackCascade):
        def run(self, file_path, printer_name):
            raise KeyError("boom")

    context = _context(tmp_path)
    dispatcher = JobDispatcher(context, cascade=BrokenCascade([]))
    outcome = dispatcher.dispatch(PrintJobRequest(PAYLOAD, "Printer1"))
    assert outcome.success is False
    assert outcome.error_code == "unexpected"
    assert context.cleanup.pending_count == 1
    context.shutdown()


def test_dispatch_message_uses_protocol_fields(tmp_path) -> None:
    backend = succeeding("render")
    context = _context(tmp_path)
    dispatcher = JobDispatcher(context, cascade=FallbackCascade([backend]))

    outcome = dispatcher.dispatch_message(
        {"type": "print", "base64String": PAYLOAD, "printerName": "Printer1"}
    )

    assert outcome.success is True
    assert Path(backend.calls[0][0]).name.startswith("document_")
    context.shutdown()


def test_platform_backend_selection() -> None:
    config = BridgeConfig().normalized()
    assert [type(b) for b in get_printing_backends(config, "Linux")] == [LinuxLpBackend]
    assert [type(b) for b in get_printing_backends(config, "Darwin")] == [MacLprBackend]
    assert get_retry_policy(config, "Linux") is None
    policy = get_retry_policy(config, "Windows")
    assert policy is not None and policy.backend.name == "windows-print-command"


@pytest.mark.parametrize(
    "fields",
    [
        {"base64String": PAYLOAD, "printerName": ["Printer1"]},
        {"base64String": 1234, "printerName": "Printer1"},
        {"base64String": {"data": PAYLOAD}, "printerName": "Printer1"},
    ],
)
def test_non_string_fields_rejected(tmp_path, fields) -> None:
    backend = succeeding("render")
    context = _context(tmp_path)
    dispatcher = JobDispatcher(context, cascade=FallbackCascade([backend]))

    outcome = dispatcher.dispatch_message({"type": "print", **fields})

    assert outcome.success is False
    assert outcome.error == "base64String and printerName must be strings"
    assert outcome.error_code == "invalid_request"
    assert backend.calls == []
    assert context.cleanup.pending_count == 0


def test_non_string_document_name_falls_back(tmp_path) -> None:
    backend = succeeding("render")
    context = _context(tmp_path)
    dispatcher = JobDispatcher(context, cascade=FallbackCascade([backend]))

    outcome = dispatcher.dispatch_message(
        {"type": "print", "base64String": PAYLOAD, "printerName": "Printer1", "documentName": 42}
    )

    assert outcome.success is True
    assert Path(backend.calls[0][0]).name.startswith("document_")
    context.shutdown()
