"""Process-wide logging for the planner CLI and the risk scheduler.

Environment:
    LOG_LEVEL              planner level (default INFO)
    LOG_FILE               optional path, rotated at 5 MB with 3 backups
    LOG_THIRD_PARTY_LEVEL  level for httpx, httpcore and apscheduler (default WARNING)
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "apscheduler")

_ROTATE_BYTES = 5 * 1024 * 1024
_ROTATE_BACKUPS = 3


def parse_level(raw: str | None, default: int) -> int:
    """Level number for a name like "debug"; unknown names give default."""
    if not raw or not raw.strip():
        return default
    value = logging.getLevelName(raw.strip().upper())
    return value if isinstance(value, int) else default


def _rotating_handler(path: str, formatter: logging.Formatter, level: int) -> logging.Handler | None:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=_ROTATE_BYTES, backupCount=_ROTATE_BACKUPS, encoding="utf-8")
    except OSError as exc:
        logging.getLogger(__name__).warning("log_file unavailable path=%s error=%s", path, exc)
        return None
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    *,
    level: int | None = None,
    log_file: str | None = None,
    third_party_level: int | None = None,
) -> None:
    """Replace root handlers with stderr (and optionally a rotating file).

    Explicit arguments win over the environment; safe to call repeatedly.
    """
    if level is None:
        level = parse_level(os.environ.get("LOG_LEVEL"), logging.INFO)
    if log_file is None:
        log_file = os.environ.get("LOG_FILE", "").strip() or None
    if third_party_level is None:
        third_party_level = parse_level(os.environ.get("LOG_THIRD_PARTY_LEVEL"), logging.WARNING)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level)
    root.addHandler(console)

    if log_file:
        handler = _rotating_handler(log_file, formatter, level)
        if handler is not None:
            root.addHandler(handler)

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)
