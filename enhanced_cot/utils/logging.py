"""Structured logging for Enhanced CoT MCP.

Configures loguru sinks (colorized text or JSON) and tracks the active
session and tool in context variables so server logs can be correlated.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger

_session_id: ContextVar[str | None] = ContextVar("session_id", default=None)
_tool_name: ContextVar[str | None] = ContextVar("tool_name", default=None)

TEXT_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[tool]}</cyan>@<cyan>{extra[session_id]}</cyan> | "
    "<level>{message}</level>"
)


class LogFormat(str, Enum):
    """Output format of the stderr sink."""

    JSON = "json"
    TEXT = "text"


class LogLevel(str, Enum):
    """Minimum level accepted by the sinks."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _inject_context(record: Any) -> None:
    """Copy context variables into ``record["extra"]`` for every sink."""
    if session_id := _session_id.get():
        record["extra"]["session_id"] = session_id
    if tool_name := _tool_name.get():
        record["extra"]["tool"] = tool_name


class StructuredLogger:
    """Owns the loguru sink setup and the per-call logging context.

    Creating one replaces every existing loguru handler.

    Example:
        log = StructuredLogger("enhanced_cot")
        with log.context(session_id="abc123", tool_name="chainofthought"):
            log.info("Thought accepted", thought_number=3)

    """

    def __init__(
        self,
        name: str,
        level: LogLevel | str = LogLevel.INFO,
        log_format: LogFormat | str = LogFormat.TEXT,
        log_file: str | Path | None = None,
    ) -> None:
        self.name = name
        self.level = LogLevel(level)
        self.log_format = LogFormat(log_format)
        self._configure_logger(log_file)

    def _configure_logger(self, log_file: str | Path | None = None) -> None:
        logger.remove()
        logger.configure(patcher=_inject_context, extra={"session_id": "-", "tool": "-"})

        if self.log_format == LogFormat.JSON:
            logger.add(sys.stderr, level=self.level.value, serialize=True)
        else:
            logger.add(sys.stderr, format=TEXT_FORMAT, level=self.level.value, colorize=True)

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            # File output is always JSON lines
            logger.add(
                path,
                level=self.level.value,
                serialize=True,
                rotation="50 MB",
                retention=5,
            )

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        logger.bind(logger_name=self.name, **kwargs).opt(depth=2).log(level, message)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        logger.bind(logger_name=self.name, **kwargs).opt(depth=1, exception=True).error(message)

    @contextmanager
    def context(
        self, session_id: str | None = None, tool_name: str | None = None
    ) -> Generator[StructuredLogger, None, None]:
        """Tag every record logged inside the block with session and tool.

        Args:
            session_id: Chain session being operated on.
            tool_name: Name of the MCP tool being executed.

        """
        session_token = _session_id.set(session_id) if session_id else None
        tool_token = _tool_name.set(tool_name) if tool_name else None
        try:
            yield self
        finally:
            if tool_token is not None:
                _tool_name.reset(tool_token)
            if session_token is not None:
                _session_id.reset(session_token)


def get_session_id() -> str | None:
    return _session_id.get()


def get_tool_name() -> str | None:
    return _tool_name.get()


def get_logger(
    name: str,
    level: LogLevel | str | None = None,
    log_format: LogFormat | str | None = None,
) -> StructuredLogger:
    """Build a StructuredLogger, filling unset options from the environment.

    LOG_LEVEL (default INFO), LOG_FORMAT (text or json, default text) and
    LOG_FILE (optional JSON-lines file) are read here.
    """
    return StructuredLogger(
        name=name,
        level=level or os.getenv("LOG_LEVEL", "INFO").upper(),
        log_format=log_format or os.getenv("LOG_FORMAT", "text").lower(),
        log_file=os.getenv("LOG_FILE") or None,
    )


_default_logger: StructuredLogger | None = None


def get_default_logger() -> StructuredLogger:
    """Get the application logger, configuring loguru on first use."""
    global _default_logger
    if _default_logger is None:
        _default_logger = get_logger("enhanced_cot")
    return _default_logger
