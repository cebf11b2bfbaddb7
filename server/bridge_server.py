"""WebSocket server hosting the session protocol on the Qt event loop."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Dict, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot
from PySide6.QtNetwork import QHostAddress, QSslConfiguration
from PySide6.QtWebSockets import QWebSocket, QWebSocketServer

from src.print_bridge.context import BridgeConfig

from .certs import ensure_self_signed_certificate, load_ssl_configuration
from .protocol import INLINE_LANE, JOB_LANE, SessionProtocolHandler

logger = logging.getLogger(__name__)

SERVER_NAME = "Print Bridge"


class _ResponseSignals(QObject):
    # emitted from pool threads, delivered queued on the server's thread
    finished = Signal(int, str)


class _MessageTask(QRunnable):
    """Handles one decoded message off the event loop thread."""

    def __init__(self, handler: SessionProtocolHandler, client_id: int, data: Any, signals: _ResponseSignals):
        super().__init__()
        self.handler = handler
        self.client_id = client_id
        self.data = data
        self.signals = signals

    def run(self) -> None:
        response = self.handler.handle_message(self.data)
        self.signals.finished.emit(self.client_id, SessionProtocolHandler.encode(response))


class BridgeServer(QObject):
    """Accepts WebSocket clients, sends the welcome and routes their messages.

    ping, get_lan_ip and malformed frames are answered on the event loop.
    Print jobs run on a job pool and printer queries on a separate query pool,
    so a stuck print command never delays the other message types.
    """

    def __init__(
        self,
        handler: SessionProtocolHandler,
        config: BridgeConfig,
        job_pool: Optional[QThreadPool] = None,
        query_pool: Optional[QThreadPool] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.handler = handler
        self.config = config.normalized()
        self.job_pool = job_pool or self._make_pool(self.config.max_concurrent_jobs)
        self.query_pool = query_pool or self._make_pool(1)
        self._server: Optional[QWebSocketServer] = None
        self._clients: Dict[int, QWebSocket] = {}
        self._next_client_id = 0
        self._signals = _ResponseSignals(self)
        self._signals.finished.connect(self._send_response)

    def _make_pool(self, size: int) -> QThreadPool:
        pool = QThreadPool(self)
        pool.setMaxThreadCount(size)
        return pool

    @property
    def is_secure(self) -> bool:
        return (
            self._server is not None
            and self._server.secureMode() == QWebSocketServer.SslMode.SecureMode
        )

    @property
    def is_listening(self) -> bool:
        return self._server is not None and self._server.isListening()

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def _ssl_configuration(self) -> Optional[QSslConfiguration]:
        if not self.config.use_tls:
            return None
        try:
            paths = ensure_self_signed_certificate(self.config.cert_dir)
            if paths is None:
                return None
            return load_ssl_configuration(*paths)
        except Exception as exc:
            logger.warning(f"Could not prepare TLS: {exc}")
            return None

    def _listen(self, mode: QWebSocketServer.SslMode, ssl_config: Optional[QSslConfiguration]) -> bool:
        server = QWebSocketServer(SERVER_NAME, mode, self)
        if ssl_config is not None:
            server.setSslConfiguration(ssl_config)
        if not server.listen(QHostAddress(self.config.host), self.config.port):
            logger.error(f"Listen on {self.config.host}:{self.config.port} failed: {server.errorString()}")
            server.deleteLater()
            return False
        server.newConnection.connect(self._on_new_connection)
        server.serverError.connect(lambda code: logger.error(f"WebSocket server error: {code}"))
        self._server = server
        return True

    def start(self) -> bool:
        ssl_config = self._ssl_configuration()
        if ssl_config is not None:
            if self._listen(QWebSocketServer.SslMode.SecureMode, ssl_config):
                logger.info(f"Secure WebSocket server running on wss://{self.config.host}:{self.config.port}")
                return True
            logger.warning("Falling back to plain WebSocket server")
        elif self.config.use_tls:
            logger.warning("SSL certificate unavailable, falling back to plain WebSocket server")

        if self._listen(QWebSocketServer.SslMode.NonSecureMode, None):
            logger.info(f"WebSocket server running on ws://{self.config.host}:{self.config.port}")
            return True
        return False

    def close(self) -> None:
        for socket in list(self._clients.values()):
            socket.close()
        self._clients.clear()
        if self._server is not None:
            self._server.close()
            self._server = None

    @Slot()
    def _on_new_connection(self) -> None:
        while self._server is not None and self._server.hasPendingConnections():
            socket = self._server.nextPendingConnection()
            client_id = self._next_client_id
            self._next_client_id += 1
            self._clients[client_id] = socket
            logger.info(f"Client connected from {socket.peerAddress().toString() or 'unknown'}")

            socket.textMessageReceived.connect(partial(self._on_text_message, client_id))
            socket.disconnected.connect(partial(self._on_disconnected, client_id))
            socket.sendTextMessage(SessionProtocolHandler.encode(self.handler.welcome()))

    def _on_text_message(self, client_id: int, text: str) -> None:
        try:
            data = self.handler.parse(text)
        except ValueError as exc:
            self._send_response(client_id, SessionProtocolHandler.encode(self.handler.malformed(exc)))
            return

        lane = self.handler.lane(data)
        if lane == INLINE_LANE:
            response = self.handler.handle_message(data)
            self._send_response(client_id, SessionProtocolHandler.encode(response))
            return
        pool = self.job_pool if lane == JOB_LANE else self.query_pool
        pool.start(_MessageTask(self.handler, client_id, data, self._signals))

    def _on_disconnected(self, client_id: int) -> None:
        socket = self._clients.pop(client_id, None)
        if socket is not None:
            logger.info("Client disconnected")
            socket.deleteLater()

    @Slot(int, str)
    def _send_response(self, client_id: int, payload: str) -> None:
        socket = self._clients.get(client_id)
        if socket is None:
            logger.debug("Dropping response for a client that already left")
            return
        socket.sendTextMessage(payload)
