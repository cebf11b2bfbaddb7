"""Bridge configuration and process-scoped resources."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .cleanup import CleanupScheduler

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8912
DEFAULT_RECOVERY_PRINTERS = ("Microsoft Print to PDF",)
_ENV_PREFIX = "PRINT_BRIDGE_"


def _default_temp_dir() -> str:
    return str(Path(tempfile.gettempdir()) / "print-bridge")


def _env_str(env: Mapping[str, str], name: str, default: str) -> str:
    value = (env.get(_ENV_PREFIX + name) or "").strip()
    return value or default


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(_env_str(env, name, str(default)))
    except ValueError:
        logger.warning(f"Ignoring invalid {_ENV_PREFIX}{name}, using {default}")
        return default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    try:
        return float(_env_str(env, name, str(default)))
    except ValueError:
        logger.warning(f"Ignoring invalid {_ENV_PREFIX}{name}, using {default}")
        return default


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = _env_str(env, name, "").lower()
    if not value:
        return default
    return value in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class BridgeConfig:
    """Runtime settings for the bridge."""

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    temp_dir: str = field(default_factory=_default_temp_dir)
    cert_dir: Optional[str] = None  # defaults to <temp_dir>/certs
    use_tls: bool = True
    cleanup_delay: float = 5.0
    render_settle_delay: float = 3.5
    render_dpi: int = 300
    pdf_reader_path: str = "Acrobat.exe"
    recovery_printers: Tuple[str, ...] = DEFAULT_RECOVERY_PRINTERS
    max_attempts: int = 3
    retry_delay: float = 2.0
    max_concurrent_jobs: int = 4
    log_level: str = "INFO"

    def normalized(self) -> "BridgeConfig":
        """Return a normalized copy used by the bridge."""
        temp_dir = (self.temp_dir or "").strip() or _default_temp_dir()
        cert_dir = (self.cert_dir or "").strip() or str(Path(temp_dir) / "certs")
        recovery = tuple(p.strip() for p in self.recovery_printers if p and p.strip())
        return replace(
            self,
            host=(self.host or "").strip() or "0.0.0.0",
            port=int(self.port) if 0 < int(self.port) < 65536 else DEFAULT_PORT,
            temp_dir=temp_dir,
            cert_dir=cert_dir,
            use_tls=bool(self.use_tls),
            cleanup_delay=max(0.0, float(self.cleanup_delay)),
            render_settle_delay=max(0.0, float(self.render_settle_delay)),
            render_dpi=max(72, int(self.render_dpi)),
            pdf_reader_path=(self.pdf_reader_path or "").strip() or "Acrobat.exe",
            recovery_printers=recovery,
            max_attempts=max(1, int(self.max_attempts)),
            retry_delay=max(0.0, float(self.retry_delay)),
            max_concurrent_jobs=max(1, int(self.max_concurrent_jobs)),
            log_level=(self.log_level or "INFO").strip().upper() or "INFO",
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "BridgeConfig":
        """Build a config from PRINT_BRIDGE_* environment variables."""
        env = os.environ if env is None else env
        defaults = cls()
        recovery_raw = _env_str(env, "RECOVERY_PRINTERS", ",".join(defaults.recovery_printers))
        return cls(
            host=_env_str(env, "HOST", defaults.host),
            port=_env_int(env, "PORT", defaults.port),
            temp_dir=_env_str(env, "TEMP_DIR", defaults.temp_dir),
            cert_dir=_env_str(env, "CERT_DIR", "") or None,
            use_tls=_env_bool(env, "USE_TLS", defaults.use_tls),
            cleanup_delay=_env_float(env, "CLEANUP_DELAY", defaults.cleanup_delay),
            render_settle_delay=_env_float(env, "RENDER_SETTLE_DELAY", defaults.render_settle_delay),
            render_dpi=_env_int(env, "RENDER_DPI", defaults.render_dpi),
            pdf_reader_path=_env_str(env, "PDF_READER_PATH", defaults.pdf_reader_path),
            recovery_printers=tuple(recovery_raw.split(",")),
            max_attempts=_env_int(env, "MAX_ATTEMPTS", defaults.max_attempts),
            retry_delay=_env_float(env, "RETRY_DELAY", defaults.retry_delay),
            max_concurrent_jobs=_env_int(env, "MAX_CONCURRENT_JOBS", defaults.max_concurrent_jobs),
            log_level=_env_str(env, "LOG_LEVEL", defaults.log_level),
        ).normalized()


class BridgeContext:
    """Owns the config, the temp directory and pending cleanups."""

    def __init__(self, config: Optional[BridgeConfig] = None):
        self.config = (config or BridgeConfig()).normalized()
        self.temp_dir = Path(self.config.temp_dir)
        self.cleanup = CleanupScheduler(self.config.cleanup_delay)
        self._started = False

    def start(self) -> "BridgeContext":
        if not self._started:
            self.temp_dir.mkdir(parents=True, exist_ok=True)
            self._started = True
            logger.info(f"Using temp directory {self.temp_dir}")
        return self

    def shutdown(self) -> None:
        self.cleanup.shutdown(flush=True)

    def is_recovery_printer(self, printer_name: str) -> bool:
        return printer_name.strip() in self.config.recovery_printers
