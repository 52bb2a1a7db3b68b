"""JSON logging for the desktop core."""

from __future__ import annotations

import json
import logging
import platform
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator

from claude_desktop import __version__
from claude_desktop.core.config import get_settings
from claude_desktop.core.trace import get_trace_id

LOGGER_PREFIX = "claude_desktop"
LOG_FILE_NAME = f"{LOGGER_PREFIX}.jsonl"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, tagged with the current command's trace id."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "trace_id": get_trace_id(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class StderrHandler(logging.StreamHandler):
    """Stream handler that always writes to the current ``sys.stderr``."""

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:  # noqa: ANN001
        pass


def _build_handler() -> logging.Handler:
    settings = get_settings()
    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=settings.log_rotate_mb * 1024 * 1024,
            backupCount=settings.log_backups,
            encoding="utf-8",
            delay=True,
        )
    return StderrHandler()


def init_logging(level: str | None = None) -> logging.Logger:
    """Attach the JSON handler to the package root logger (idempotent)."""
    root = logging.getLogger(LOGGER_PREFIX)
    root.setLevel((level or get_settings().log_level).upper())
    if not root.handlers:
        handler = _build_handler()
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger, e.g. ``get_logger("voice")``."""
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")


def log_system_info() -> None:
    logger = get_logger("system")
    logger.info("Claude Desktop v%s", __version__)
    logger.info("OS: %s %s", platform.system().lower(), platform.machine())


@contextmanager
def perf_timer(name: str, threshold_ms: float | None = None) -> Iterator[None]:
    """Log how long the block took; with a threshold, only slow blocks are logged."""
    logger = get_logger("perf")
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        if threshold_ms is None:
            logger.debug("Finished: %s (%.2f ms)", name, elapsed_ms)
        elif elapsed_ms >= threshold_ms:
            logger.debug("Slow operation: %s took %.2f ms (threshold %s ms)", name, elapsed_ms, threshold_ms)
