# -*- coding: utf-8 -*-
"""Message routing of the session protocol handler."""

from __future__ import annotations

import json

import pytest

from fakes import CrashingBackend, succeeding
from server.protocol import SessionProtocolHandler
from src.print_bridge.cascade import FallbackCascade
from src.print_bridge.context import BridgeConfig, BridgeContext
from src.print_bridge.dispatcher import JobDispatcher

FIXED_TIME = "2024-05-01T12:00:00.000Z"


class StaticInventory:
    def __init__(self, printers):
        self.printers = printers

    def list_printers(self):
        return list(self.printers)


@pytest.fixture()
def context(tmp_path):
    ctx = BridgeContext(BridgeConfig(temp_dir=str(tmp_path / "jobs"), cleanup_delay=60.0))
    yield ctx
    ctx.shutdown()


def _handler(context, backends, printers=("Printer1",), lan_ip="192.168.1.20"):
    dispatcher = JobDispatcher(context, cascade=FallbackCascade(backends))
    return SessionProtocolHandler(
        dispatcher,
        StaticInventory(printers),
        clock=lambda: FIXED_TIME,
        lan_ip_lookup=lambda: lan_ip,
    )


def test_print_success_response(context) -> None:
    handler = _handler(context, [succeeding("render", output="Printed 1 page(s)")])
    request = {
        "type": "print",
        "base64String": "data:application/pdf;base64,AAAA",
        "printerName": "Printer1",
        "documentName": "Invoice",
    }

    response = handler.handle_text(json.dumps(request))

    assert response["type"] == "print_response"
    assert response["success"] is True
    assert response["message"] == "Print job sent successfully"
    assert response["result"]["success"] is True
    assert response["result"]["printer"] == "Printer1"
    assert response["result"]["method"] == "render"
    assert "Invoice_" in response["result"]["file"]
    assert "error" not in response["result"]
    assert "error" not in response


def test_print_missing_printer_response(context) -> None:
    handler = _handler(context, [succeeding("render")])
    response = handler.handle_text(
        json.dumps({"type": "print", "base64String": "AAAA", "printerName": ""})
    )
    assert response == {
        "type": "print_response",
        "success": False,
        "error": "base64String and printerName are required",
    }


def test_print_all_methods_failed_response(context) -> None:
    handler = _handler(context, [CrashingBackend()])
    response = handler.handle_message(
        {"type": "print", "base64String": "AAAA", "printerName": "Printer1"}
    )
    assert response["type"] == "print_response"
    assert response["success"] is False
    assert response["error"].startswith("All printing methods failed. Last error:")


def test_get_printers(context) -> None:
    handler = _handler(context, [], printers=("Office Laser", "Label Printer"))
    assert handler.handle_text('{"type": "get_printers"}') == {
        "type": "printers_response",
        "success": True,
        "printers": ["Office Laser", "Label Printer"],
    }


def test_ping_and_welcome(context) -> None:
    handler = _handler(context, [])
    assert handler.handle_text('{"type": "ping"}') == {
        "type": "pong",
        "message": "Service is running",
        "timestamp": FIXED_TIME,
    }
    welcome = handler.welcome()
    assert welcome["type"] == "welcome"
    assert welcome["timestamp"] == FIXED_TIME
    assert welcome["message"]


def test_lan_ip(context) -> None:
    assert _handler(context, []).handle_text('{"type": "get_lan_ip"}') == {
        "type": "lan_ip_response",
        "success": True,
        "ipAddress": "192.168.1.20",
    }
    missing = _handler(context, [], lan_ip=None).handle_text('{"type": "get_lan_ip"}')
    assert missing["success"] is False
    assert missing["error"]


@pytest.mark.parametrize("text", ['{"type": "reboot"}', "{}", "[1, 2]", '"print"', '{"type": 5}'])
def test_unknown_message_type(context, text: str) -> None:
    assert _handler(context, []).handle_text(text) == {
        "type": "error",
        "message": "Unknown message type",
    }


def test_malformed_message(context) -> None:
    response = _handler(context, []).handle_text("{not json")
    assert response["type"] == "error"
    assert response["message"]
    assert response["message"] != "Unknown message type"


def test_handler_exception_becomes_error_message(context) -> None:
    class ExplodingInventory:
        def list_printers(self):
            raise RuntimeError("inventory exploded")

    dispatcher = JobDispatcher(context, cascade=FallbackCascade([]))
    handler = SessionProtocolHandler(dispatcher, ExplodingInventory(), clock=lambda: FIXED_TIME)
    assert handler.handle_text('{"type": "get_printers"}') == {
        "type": "error",
        "message": "inventory exploded",
    }


def test_encode_round_trips_json() -> None:
    message = {"type": "pong", "message": "Service is running", "timestamp": FIXED_TIME}
    assert json.loads(SessionProtocolHandler.encode(message)) == message


def test_only_process_bound_messages_leave_the_event_loop() -> None:
    assert SessionProtocolHandler.lane({"type": "print"}) == "job"
    assert SessionProtocolHandler.lane({"type": "get_printers"}) == "query"
    for data in ({"type": "ping"}, {"type": "get_lan_ip"}, {"type": "reboot"}, [1], {"type": 5}):
        assert SessionProtocolHandler.lane(data) == "inline"
