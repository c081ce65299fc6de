"""Structured logging configuration for the account service.

Provides:
- JSON structured logging for production environments
- Coloured console output when DEBUG is on
- Optional rotating file output (10MB max, 5 backups)
- Redaction of passwords, tokens and secrets before any handler sees them
- LogContext for attaching structured context to every record in a scope

Records carry structured fields through ``extra={"context": {...}}``; the
formatters render that mapping alongside the message.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, ClassVar

SERVICE_NAME = "account-service"
SERVICE_VERSION = "0.1.0"

# Structured context of the current LogContext scope; per task under asyncio
_log_scope: ContextVar[dict[str, Any] | None] = ContextVar("log_scope", default=None)


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Merge LogContext scope and per-call ``extra`` context of a record.

    Per-call context wins on key collisions.
    """
    scope = _log_scope.get() or {}
    context = getattr(record, "context", None) or {}
    return {**scope, **context}


class SensitiveDataFilter(logging.Filter):
    """Redact credential-like values from log messages and arguments.

    Examples:
        >>> logger = logging.getLogger("account_service")
        >>> logger.addFilter(SensitiveDataFilter())
        >>> logger.info("User password: secret123")
        # Logs: "User password: [REDACTED]"
    """

    SENSITIVE_KEYS: ClassVar[tuple[str, ...]] = (
        "password",
        "passwd",
        "secret",
        "refresh_token",
        "access_token",
        "token",
        "authorization",
        "bearer",
        "credential",
    )

    _PATTERNS: ClassVar[list[tuple[str, re.Pattern[str]]]] = [
        (key, re.compile(rf"{key}[:=]\s*[\"']?[^\s\"',]+", re.IGNORECASE))
        for key in SENSITIVE_KEYS
    ]
    _BEARER = re.compile(r"Bearer\s+[A-Za-z0-9\-_\.]+", re.IGNORECASE)

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact the record in place. Always lets the record through."""
        record.msg = self.redact(str(record.msg))
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self.redact(v) if isinstance(v, str) else v
                    for k, v in record.args.items()
                }
            else:
                record.args = tuple(
                    self.redact(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )
        return True

    @classmethod
    def redact(cls, text: str) -> str:
        text = cls._BEARER.sub("Bearer [REDACTED]", text)
        for key, pattern in cls._PATTERNS:
            text = pattern.sub(f"{key}: [REDACTED]", text)
        return text


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Format:
        {
            "timestamp": "2026-01-12T10:30:45.123Z",
            "level": "INFO",
            "logger": "account_service.services.auth_service",
            "message": "Login successful",
            "service": "account-service",
            "context": {"user_id": "...", "action": "login"}
        }
    """

    def __init__(
        self,
        service_name: str = SERVICE_NAME,
        service_version: str = SERVICE_VERSION,
    ) -> None:
        super().__init__()
        self.service_name = service_name
        self.service_version = service_version

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "version": self.service_version,
        }

        context = record_context(record)
        if context:
            log_entry["context"] = context

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        if record.levelno >= logging.ERROR:
            log_entry["source"] = {
                "function": record.funcName,
                "line": record.lineno,
                "file": record.pathname,
            }

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ColoredConsoleFormatter(logging.Formatter):
    """Human-readable coloured formatter for development."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        # Format a copy so other handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname}{self.RESET}"

        context = record_context(record)
        if context:
            record.msg = f"{record.msg} | Context: {json.dumps(context, default=str)}"

        return super().format(record)


def setup_logging(
    log_level: str = "INFO",
    log_file: str | None = None,
    service_name: str = SERVICE_NAME,
    enable_json: bool = True,
    debug: bool = False,
) -> logging.Logger:
    """Configure the root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a rotating log file. Console only if None
        service_name: Name of the service for log metadata
        enable_json: Use JSON for non-debug console output and the file
        debug: Use the coloured console formatter

    Returns:
        Configured root logger instance

    Examples:
        >>> logger = setup_logging(log_level="INFO")
        >>> logger.info("Application started", extra={"context": {"port": 8000}})
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    sensitive_filter = SensitiveDataFilter()
    plain_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if debug:
        console_handler.setFormatter(ColoredConsoleFormatter())
    elif enable_json:
        console_handler.setFormatter(JSONFormatter(service_name=service_name))
    else:
        console_handler.setFormatter(plain_formatter)
    console_handler.addFilter(sensitive_filter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file_path = Path(log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(log_file_path),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            JSONFormatter(service_name=service_name) if enable_json else plain_formatter
        )
        file_handler.addFilter(sensitive_filter)
        logger.addHandler(file_handler)

    logger.info(
        "Logging initialized",
        extra={
            "context": {
                "log_level": log_level,
                "log_file": log_file,
                "service": service_name,
            }
        },
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name.

    Examples:
        >>> from account_service.core.logging import get_logger
        >>> logger = get_logger(__name__)
    """
    return logging.getLogger(name)


class LogContext:
    """Attach structured context to every record logged inside a scope.

    The scope lives in a context variable, so concurrent requests served by
    the same event loop each see only their own context.

    Examples:
        >>> logger = get_logger(__name__)
        >>> with LogContext(request_id="abc", path="/api/v1/auth/login"):
        ...     logger.info("Handling request")
    """

    def __init__(self, **context: Any) -> None:
        self.context = context
        self._token: Token[dict[str, Any] | None] | None = None

    def __enter__(self) -> LogContext:
        current = _log_scope.get() or {}
        self._token = _log_scope.set({**current, **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _log_scope.reset(self._token)
            self._token = None


__all__ = [
    "ColoredConsoleFormatter",
    "JSONFormatter",
    "LogContext",
    "SensitiveDataFilter",
    "get_logger",
    "record_context",
    "setup_logging",
]
