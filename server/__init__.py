"""WebSocket front end for the print bridge."""

from .bridge_server import BridgeServer
from .protocol import SessionProtocolHandler

__all__ = ["BridgeServer", "SessionProtocolHandler"]
