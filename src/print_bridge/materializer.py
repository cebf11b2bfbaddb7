"""Decode job payloads into temporary files."""

from __future__ import annotations

import base64
import binascii
import logging
import re
import tempfile
import time
from datetime import datetime
from pathlib import Path

from .base_backend import MaterialFile
from .errors import PayloadDecodeError

logger = logging.getLogger(__name__)

# "data:application/pdf;base64," and similar; base64 never contains ':' or ','
_URI_PREFIX_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:[^,]*,")
_UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_NAME_LENGTH = 64
_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def strip_uri_prefix(payload: str) -> str:
    return _URI_PREFIX_RE.sub("", payload.strip(), count=1)


def sanitize_document_name(name: str | None) -> str:
    safe = _UNSAFE_NAME_RE.sub("_", (name or "").strip()).strip("._")
    return safe[:_MAX_NAME_LENGTH] or "document"


def decode_payload(payload_encoded: str) -> bytes:
    """Decode standard or URL-safe base64, with or without trailing padding."""
    data = "".join(strip_uri_prefix(payload_encoded).split()).translate(_URLSAFE_TO_STANDARD)
    data += "=" * (-len(data) % 4)
    try:
        decoded = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PayloadDecodeError(f"Invalid base64 payload: {exc}") from exc
    if not decoded:
        raise PayloadDecodeError("Decoded payload is empty")
    return decoded


class PayloadMaterializer:
    """Writes decoded payloads into the bridge temp directory."""

    def __init__(self, temp_dir: str | Path):
        self.temp_dir = Path(temp_dir)

    def materialize(self, payload_encoded: str, document_name: str = "document") -> MaterialFile:
        content = decode_payload(payload_encoded)
        created_at = datetime.now()
        prefix = f"{sanitize_document_name(document_name)}_{int(time.time() * 1000)}_"
        with tempfile.NamedTemporaryFile(
            delete=False,
            dir=self.temp_dir,
            prefix=prefix,
            suffix=".pdf",
        ) as tmp:
            tmp.write(content)
            path = Path(tmp.name)
        logger.info(f"Materialized {len(content)} bytes to {path.name}")
        return MaterialFile(path=path, created_at=created_at)
