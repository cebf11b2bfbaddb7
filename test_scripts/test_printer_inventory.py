# -*- coding: utf-8 -*-
"""Printer enumeration parsing and failure handling."""

from __future__ import annotations

import subprocess

from fakes import FakeCompleted, FakeRun
from src.print_bridge import inventory as inventory_module
from src.print_bridge.inventory import PrinterInventory

WMIC_OUTPUT = "Name                          \r\nMicrosoft Print to PDF\r\n\r\nOffice Laser  \r\n\r\n"
LPSTAT_OUTPUT = (
    "printer Office_Laser is idle.  enabled since Mon 01 Jan 2024 09:00:00\n"
    "\tForm mounted:\n"
    "printer Label-Printer disabled since Mon 01 Jan 2024 09:00:00 -\n"
    "\treason unknown\n"
)


def test_windows_parses_wmic(monkeypatch) -> None:
    fake_run = FakeRun(FakeCompleted(stdout=WMIC_OUTPUT))
    monkeypatch.setattr(inventory_module.subprocess, "run", fake_run)
    assert PrinterInventory("Windows").list_printers() == ["Microsoft Print to PDF", "Office Laser"]
    assert fake_run.calls == [["wmic", "printer", "get", "name"]]


def test_posix_parses_lpstat(monkeypatch) -> None:
    fake_run = FakeRun(FakeCompleted(stdout=LPSTAT_OUTPUT))
    monkeypatch.setattr(inventory_module.subprocess, "run", fake_run)
    assert PrinterInventory("Linux").list_printers() == ["Office_Laser", "Label-Printer"]
    assert fake_run.calls == [["lpstat", "-p"]]


def test_query_failure_returns_empty(monkeypatch) -> None:
    monkeypatch.setattr(inventory_module.subprocess, "run", FakeRun(FakeCompleted(returncode=1)))
    assert PrinterInventory("Darwin").list_printers() == []

    monkeypatch.setattr(inventory_module.subprocess, "run", FakeRun(exc=FileNotFoundError("lpstat")))
    assert PrinterInventory("Linux").list_printers() == []

    monkeypatch.setattr(
        inventory_module.subprocess, "run", FakeRun(exc=subprocess.TimeoutExpired("wmic", 5))
    )
    assert PrinterInventory("Windows").list_printers() == []
