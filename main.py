import argparse
import logging
import platform
import signal
import sys

from dotenv import load_dotenv
from PySide6.QtCore import QCoreApplication, QTimer
from PySide6.QtWidgets import QApplication

from server.bridge_server import BridgeServer
from server.protocol import SessionProtocolHandler
from src.print_bridge import BridgeConfig, BridgeContext, JobDispatcher, PrinterInventory


def parse_args(argv):
    parser = argparse.ArgumentParser(description="Local WebSocket bridge to the OS print system")
    parser.add_argument("--host", help="listen address")
    parser.add_argument("--port", type=int, help="listen port (default 8912)")
    parser.add_argument("--no-tls", action="store_true", help="serve plain ws:// only")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    return parser.parse_args(argv)


def build_config(args) -> BridgeConfig:
    config = BridgeConfig.from_env()
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.no_tls:
        config.use_tls = False
    if args.log_level:
        config.log_level = args.log_level
    return config.normalized()


if __name__ == "__main__":
    load_dotenv()
    args = parse_args(sys.argv[1:])
    config = build_config(args)
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    # QPrinter (render-and-print backend) needs the GUI application on Windows
    if platform.system() == "Windows":
        app = QApplication(sys.argv)
        app.setQuitOnLastWindowClosed(False)
    else:
        app = QCoreApplication(sys.argv)

    context = BridgeContext(config).start()
    dispatcher = JobDispatcher.for_platform(context)
    handler = SessionProtocolHandler(dispatcher, PrinterInventory())
    server = BridgeServer(handler, config)
    if not server.start():
        logging.getLogger(__name__).error("Print bridge could not bind its port")
        sys.exit(1)

    app.aboutToQuit.connect(server.close)
    app.aboutToQuit.connect(context.shutdown)

    # let the interpreter see Ctrl+C while Qt owns the loop
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    heartbeat = QTimer()
    heartbeat.start(500)
    heartbeat.timeout.connect(lambda: None)

    sys.exit(app.exec())
