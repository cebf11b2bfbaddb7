"""Self-signed certificate provisioning for the secure WebSocket transport."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Tuple

from PySide6.QtNetwork import QSsl, QSslCertificate, QSslConfiguration, QSslKey, QSslSocket

logger = logging.getLogger(__name__)

CERT_FILE = "server.crt"
KEY_FILE = "server.key"
CERT_SUBJECT = "/O=Print Bridge/CN=localhost"


def ensure_self_signed_certificate(cert_dir: str | Path, days: int = 365) -> Optional[Tuple[Path, Path]]:
    """Return (cert, key) paths, generating them with openssl on first use.

    Returns None when no usable certificate can be produced.
    """
    cert_dir = Path(cert_dir)
    cert_path = cert_dir / CERT_FILE
    key_path = cert_dir / KEY_FILE

    if not (cert_path.exists() and key_path.exists()):
        openssl = shutil.which("openssl")
        if openssl is None:
            logger.warning("openssl not found; secure transport unavailable")
            return None
        cert_dir.mkdir(parents=True, exist_ok=True)
        cmd = [
            openssl, "req", "-x509",
            "-newkey", "rsa:2048",
            "-keyout", str(key_path),
            "-out", str(cert_path),
            "-days", str(days),
            "-nodes",
            "-subj", CERT_SUBJECT,
        ]
        try:
            subprocess.run(cmd, capture_output=True, text=True, check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.warning(f"Could not generate SSL certificate: {exc}")
            return None
        logger.info(f"Generated self-signed certificate in {cert_dir}")
    else:
        logger.info("Using existing SSL certificate")

    if cert_path.stat().st_size == 0 or key_path.stat().st_size == 0:
        logger.warning("Certificate files are empty")
        return None
    return cert_path, key_path


def load_ssl_configuration(cert_path: Path, key_path: Path) -> Optional[QSslConfiguration]:
    """Build a server-side QSslConfiguration, or None if TLS cannot be used."""
    if not QSslSocket.supportsSsl():
        logger.warning("Qt has no TLS backend available")
        return None
    certificate = QSslCertificate(cert_path.read_bytes(), QSsl.EncodingFormat.Pem)
    key = QSslKey(key_path.read_bytes(), QSsl.KeyAlgorithm.Rsa, QSsl.EncodingFormat.Pem)
    if certificate.isNull() or key.isNull():
        logger.warning("Certificate or key could not be parsed")
        return None
    config = QSslConfiguration.defaultConfiguration()
    config.setLocalCertificate(certificate)
    config.setPrivateKey(key)
    config.setPeerVerifyMode(QSslSocket.PeerVerifyMode.VerifyNone)
    return config
