"""JSON message routing between clients and the dispatch engine."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional

from src.print_bridge.dispatcher import JobDispatcher
from src.print_bridge.inventory import PrinterInventory
from utils.helpers import get_lan_ip_address, iso_timestamp

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Print Bridge - Service connected successfully"
PONG_MESSAGE = "Service is running"
UNKNOWN_TYPE_MESSAGE = "Unknown message type"

# where a message is handled: "job" and "query" wait on external processes
INLINE_LANE = "inline"
QUERY_LANE = "query"
JOB_LANE = "job"
_LANES = {"print": JOB_LANE, "get_printers": QUERY_LANE}

Message = Dict[str, Any]


class SessionProtocolHandler:
    """Maps one inbound text frame to exactly one response message."""

    def __init__(
        self,
        dispatcher: JobDispatcher,
        inventory: Optional[PrinterInventory] = None,
        clock: Callable[[], str] = iso_timestamp,
        lan_ip_lookup: Callable[[], Optional[str]] = get_lan_ip_address,
    ):
        self.dispatcher = dispatcher
        self.inventory = inventory or PrinterInventory()
        self._clock = clock
        self._lan_ip_lookup = lan_ip_lookup
        self._routes: Dict[str, Callable[[Message], Message]] = {
            "print": self._handle_print,
            "get_printers": self._handle_get_printers,
            "ping": self._handle_ping,
            "get_lan_ip": self._handle_get_lan_ip,
        }

    def welcome(self) -> Message:
        return {"type": "welcome", "message": WELCOME_MESSAGE, "timestamp": self._clock()}

    @staticmethod
    def parse(text: str) -> Any:
        return json.loads(text)

    @staticmethod
    def malformed(exc: ValueError) -> Message:
        logger.warning(f"Malformed message: {exc}")
        return {"type": "error", "message": str(exc)}

    @staticmethod
    def lane(data: Any) -> str:
        message_type = data.get("type") if isinstance(data, dict) else None
        return _LANES.get(message_type, INLINE_LANE) if isinstance(message_type, str) else INLINE_LANE

    def handle_text(self, text: str) -> Message:
        try:
            data = self.parse(text)
        except ValueError as exc:
            return self.malformed(exc)
        return self.handle_message(data)

    def handle_message(self, data: Any) -> Message:
        message_type = data.get("type") if isinstance(data, dict) else None
        handler = self._routes.get(message_type) if isinstance(message_type, str) else None
        if handler is None:
            return {"type": "error", "message": UNKNOWN_TYPE_MESSAGE}
        logger.debug(f"Handling {message_type} message")
        try:
            return handler(data)
        except Exception as exc:
            logger.exception(f"Error processing {message_type} message: {exc}")
            return {"type": "error", "message": str(exc)}

    def _handle_print(self, data: Message) -> Message:
        outcome = self.dispatcher.dispatch_message(data)
        return {"type": "print_response", **outcome.to_dict()}

    def _handle_get_printers(self, data: Message) -> Message:
        return {
            "type": "printers_response",
            "success": True,
            "printers": self.inventory.list_printers(),
        }

    def _handle_ping(self, data: Message) -> Message:
        return {"type": "pong", "message": PONG_MESSAGE, "timestamp": self._clock()}

    def _handle_get_lan_ip(self, data: Message) -> Message:
        address = self._lan_ip_lookup()
        if not address:
            return {
                "type": "lan_ip_response",
                "success": False,
                "error": "No LAN IPv4 address found",
            }
        return {"type": "lan_ip_response", "success": True, "ipAddress": address}

    @staticmethod
    def encode(message: Message) -> str:
        return json.dumps(message)
