"""Loguru configuration shared by the service and its tests.

Every record carries the request correlation id and passes through
:func:`sanitize_record` before it reaches a sink.
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<lvl>{message}</lvl>"
)

_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")

_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default="-")


def _default_log_file() -> Path:
    configured = os.getenv("LOG_FILE")
    if configured:
        return Path(configured)
    return Path.cwd() / "instance" / "sessionauth.log"


class _InterceptHandler(logging.Handler):
    """Forwards stdlib ``logging`` records (werkzeug, sqlalchemy) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _patch_record(record: Any) -> None:
    record["extra"].setdefault("correlation_id", _CORRELATION_ID.get())
    sanitize_record(record)


class ContextualLogger:
    """Proxy for loguru that binds the current correlation id on each call."""

    def __getattr__(self, name):  # pragma: no cover
        return getattr(_logger.bind(correlation_id=_CORRELATION_ID.get()), name)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or "-")


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


def clear_correlation_id() -> None:
    _CORRELATION_ID.set("-")


def setup_logging(level: str | None = None, *, debug_mode: bool = False) -> None:
    level = "DEBUG" if debug_mode else (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_file = _default_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    _logger.remove()
    _logger.configure(patcher=_patch_record, extra={"correlation_id": "-"})
    _logger.add(sys.stderr, level=level, format=_FORMAT, colorize=True, diagnose=False)
    _logger.add(
        str(log_file),
        level=level,
        format=_FORMAT,
        colorize=False,
        diagnose=False,
        enqueue=True,
        rotation="10 MB",
        retention=5,
        encoding="utf-8",
    )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.INFO)


logger = ContextualLogger()

__all__ = [
    "clear_correlation_id",
    "get_correlation_id",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
