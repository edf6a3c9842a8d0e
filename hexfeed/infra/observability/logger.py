"""Observability layer: centralized logger setup for server and stream sessions."""

from __future__ import annotations

import logging

_LEVEL_ALIASES = {
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "WARN": "WARNING",
    "WARNING": "WARNING",
    "ERROR": "ERROR",
}


def normalize_level(level: str | None) -> str:
    """Map LOG_LEVEL values onto logging level names; unknown values mean INFO."""
    if not level:
        return "INFO"
    return _LEVEL_ALIASES.get(level.strip().upper(), "INFO")


def setup_logging(level: str = "INFO") -> None:
    """Configure root logger once for structured single-line console output."""
    normalized = normalize_level(level)
    logging.basicConfig(
        level=normalized,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        force=True,
    )
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(normalized)
        logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """Return a module-level logger instance."""
    return logging.getLogger(name)
