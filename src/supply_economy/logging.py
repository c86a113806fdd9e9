"""
Logging bootstrap for the supply economy.

Usage:
    from supply_economy.config import load_config
    from supply_economy.logging import configure_logging

    config = load_config()
    configure_logging(config.logging)  # idempotent

- Supports JSON (python-json-logger) and plain formats
- Supports stdout/stderr/file destinations
- "trace" diagnostics of the engine are emitted at DEBUG
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from pythonjsonlogger import jsonlogger

from supply_economy.config import LoggingSettings

_configured = False

NOISY_LIBS = ("asyncio", "urllib3")


def _level_from_str(level: str) -> int:
    if level.upper() == "TRACE":
        return logging.DEBUG
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _make_handler(destination: str, filename: Optional[str]) -> logging.Handler:
    if destination == "stdout":
        return logging.StreamHandler(stream=sys.stdout)
    if destination == "stderr":
        return logging.StreamHandler(stream=sys.stderr)
    path = Path(filename or "supply-economy.log")
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def _make_formatter(json_enabled: bool, fmt: str) -> logging.Formatter:
    if json_enabled:
        return jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(process)d %(threadName)s"
        )
    return logging.Formatter(fmt)


def configure_logging(settings: Optional[LoggingSettings] = None, *, force: bool = False) -> None:
    """
    Configure root logging. Safe to call multiple times.

    Params:
      - settings: LoggingSettings (defaults used when None)
      - force: if True, reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    settings = settings or LoggingSettings()
    lvl = _level_from_str(settings.level)
    handler = _make_handler(settings.destination, settings.filename)
    handler.setFormatter(_make_formatter(settings.json_format, settings.format))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.setLevel(lvl)
    root.addHandler(handler)

    for name in NOISY_LIBS:
        logging.getLogger(name).setLevel(max(lvl, logging.INFO))

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Mirror of logging.getLogger that makes sure a base configuration exists."""
    if not (_configured or logging.getLogger().handlers):
        configure_logging()
    return logging.getLogger(name)
