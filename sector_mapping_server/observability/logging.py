"""
Structured logging for the Sector Mapping Server.

Provides JSON-formatted logs with request context and sensitive data
handling for production deployments, and readable text logs for
development.

Features:
- JSON and text formatters
- Request context tracking (request_id, session_id, correlation_id)
- Redaction of e-mail addresses, long digit runs and secret-looking keys
- Service metadata (name, version, environment)
- Rotating file handler support
"""

import json
import logging
import os
import re
import sys
import time
import traceback
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import UTC, datetime
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, TypeVar

LOGGER_ROOT = "sector_mapping_server"

# Context variables for request tracking
_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_session_id: ContextVar[str | None] = ContextVar("session_id", default=None)
_operation: ContextVar[str | None] = ContextVar("operation", default=None)
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Service metadata (set at startup)
_service_name: str = "sector-mapping-server"
_service_version: str = "0.1.0"
_environment: str = "development"

# Sensitive data patterns for redaction
REDACT_PATTERNS = [
    r"\b\d{10,16}\b",  # Phone, card and account numbers
    r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b",  # Email
]


# --- Configuration ---


class LogConfig:
    """
    Logging defaults read from environment variables.

    LoggingConfig in config.py is the validated source; setup_logging()
    falls back to these values for anything it is not given.
    """

    def __init__(self):
        self.level = os.getenv("SECTOR_LOG_LEVEL", "INFO").upper()
        self.format = os.getenv("SECTOR_LOG_FORMAT", "json")
        self.file_path = os.getenv("SECTOR_LOG_FILE")
        self.max_size_mb = int(os.getenv("SECTOR_LOG_MAX_SIZE_MB", "50"))
        self.retention_count = int(os.getenv("SECTOR_LOG_RETENTION_COUNT", "5"))

        self.service_name = os.getenv("SECTOR_SERVICE_NAME", "sector-mapping-server")
        self.environment = os.getenv("SECTOR_ENVIRONMENT", "development")

        self.max_message_length = int(os.getenv("SECTOR_LOG_MAX_MSG_LENGTH", "1000"))
        self.max_data_length = int(os.getenv("SECTOR_LOG_MAX_DATA_LENGTH", "500"))


_config = LogConfig()


# --- Context Management ---


def set_request_context(
    request_id: str | None = None,
    session_id: str | None = None,
    operation: str | None = None,
    correlation_id: str | None = None,
) -> None:
    """
    Set the current request context for logging.

    Call this at the start of each HTTP request or tool invocation.

    Args:
        request_id: Unique ID for this specific request
        session_id: MCP session ID (if available)
        operation: Tool name or HTTP route being served
        correlation_id: ID propagated from an upstream caller
    """
    if request_id:
        _request_id.set(request_id)
    if session_id:
        _session_id.set(session_id)
    if operation:
        _operation.set(operation)
    if correlation_id:
        _correlation_id.set(correlation_id)


def clear_request_context() -> None:
    """Clear the current request context."""
    _request_id.set(None)
    _session_id.set(None)
    _operation.set(None)
    _correlation_id.set(None)


def get_request_context() -> dict[str, str | None]:
    """Get the current request context."""
    return {
        "request_id": _request_id.get(),
        "session_id": _session_id.get(),
        "operation": _operation.get(),
        "correlation_id": _correlation_id.get(),
    }


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return f"req_{uuid.uuid4().hex[:12]}"


def set_service_metadata(name: str, version: str, environment: str) -> None:
    """Set service metadata for log records. Call once at startup."""
    global _service_name, _service_version, _environment
    _service_name = name
    _service_version = version
    _environment = environment


# --- Sensitive Data Handling ---


def sanitize_text(text: str, max_length: int | None = None) -> str:
    """
    Sanitize text for logging by redacting sensitive data and truncating.

    Args:
        text: The text to sanitize
        max_length: Maximum length (uses config default if None)

    Returns:
        Sanitized text safe for logging
    """
    if not text:
        return ""

    max_len = max_length or _config.max_data_length

    sanitized = text
    for pattern in REDACT_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized)

    if len(sanitized) > max_len:
        sanitized = sanitized[:max_len] + "..."

    return sanitized


def sanitize_dict(data: dict[str, Any], sensitive_keys: set | None = None) -> dict[str, Any]:
    """
    Sanitize a dictionary for logging.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Key fragments to fully redact
            (default: password, token, secret, api_key, auth)

    Returns:
        Sanitized dictionary safe for logging
    """
    if sensitive_keys is None:
        sensitive_keys = {"password", "token", "secret", "api_key", "auth"}

    result = {}
    for k, v in data.items():
        k_lower = k.lower()
        if any(sensitive in k_lower for sensitive in sensitive_keys):
            result[k] = "[REDACTED]"
        elif isinstance(v, str):
            result[k] = sanitize_text(v)
        elif isinstance(v, dict):
            result[k] = sanitize_dict(v, sensitive_keys)
        elif isinstance(v, list):
            result[k] = [sanitize_text(item) if isinstance(item, str) else item for item in v[:10]]
            if len(v) > 10:
                result[k].append(f"... and {len(v) - 10} more")
        else:
            result[k] = v

    return result


# --- Formatters ---


class JSONFormatter(logging.Formatter):
    """
    Formats log records as one JSON object per line.

    Field names are stable so log aggregators can index them.
    """

    def __init__(self, include_service_info: bool = True):
        super().__init__()
        self.include_service_info = include_service_info

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._truncate_message(record.getMessage()),
        }

        if self.include_service_info:
            log_data["service"] = {
                "name": _service_name,
                "version": _service_version,
                "environment": _environment,
            }

        context = {k: v for k, v in get_request_context().items() if v is not None}
        if context:
            log_data["context"] = context

        if getattr(record, "data", None):
            log_data["data"] = sanitize_dict(record.data)

        if record.exc_info:
            log_data["error"] = self._format_exception(record.exc_info)

        # Source location for warnings and errors
        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": self._shorten_path(record.pathname),
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str, ensure_ascii=False)

    def _truncate_message(self, message: str) -> str:
        max_len = _config.max_message_length
        if len(message) > max_len:
            return message[:max_len] + "..."
        return message

    def _shorten_path(self, pathname: str) -> str:
        idx = pathname.find(LOGGER_ROOT)
        return pathname[idx:] if idx >= 0 else pathname

    def _format_exception(self, exc_info) -> dict[str, Any]:
        exc_type, exc_value, exc_tb = exc_info

        error_data: dict[str, Any] = {
            "type": exc_type.__name__ if exc_type else "Unknown",
            "message": str(exc_value)[:500] if exc_value else "",
        }

        if exc_tb:
            error_data["stack"] = [
                {
                    "file": self._shorten_path(frame.filename),
                    "line": frame.lineno,
                    "function": frame.name,
                }
                for frame in traceback.extract_tb(exc_tb)[-5:]
            ]

        return error_data


class TextFormatter(logging.Formatter):
    """Human-readable log lines for development, colored on a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")

        level = record.levelname
        if self.use_colors:
            level_str = f"{self.COLORS.get(level, '')}{level:8}{self.COLORS['RESET']}"
        else:
            level_str = f"{level:8}"

        base = f"{timestamp} [{level_str}] {record.name}: {record.getMessage()}"

        context = get_request_context()
        context_parts = []
        if context.get("request_id"):
            context_parts.append(f"req={context['request_id'][-8:]}")
        if context.get("operation"):
            context_parts.append(f"op={context['operation']}")
        if context_parts:
            base = f"{base} ({', '.join(context_parts)})"

        if getattr(record, "data", None):
            data_str = " ".join(f"{k}={str(v)[:50]}" for k, v in list(record.data.items())[:5])
            base = f"{base} | {data_str}"

        if record.exc_info:
            base = f"{base}\n{self.formatException(record.exc_info)}"

        return base


# --- Logger Wrapper ---


class StructuredLogger:
    """A logger wrapper that attaches a structured `data` payload to records."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log(self, level: int, message: str, data: dict[str, Any] | None = None, **kwargs):
        extra = {"data": data} if data else {}
        self.logger.log(level, message, extra=extra, **kwargs)

    def debug(self, message: str, data: dict[str, Any] | None = None, **kwargs):
        self._log(logging.DEBUG, message, data, **kwargs)

    def info(self, message: str, data: dict[str, Any] | None = None, **kwargs):
        self._log(logging.INFO, message, data, **kwargs)

    def warning(self, message: str, data: dict[str, Any] | None = None, **kwargs):
        self._log(logging.WARNING, message, data, **kwargs)

    def error(self, message: str, data: dict[str, Any] | None = None, **kwargs):
        self._log(logging.ERROR, message, data, **kwargs)

    def exception(self, message: str, data: dict[str, Any] | None = None, **kwargs):
        self._log(logging.ERROR, message, data, exc_info=True, **kwargs)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance (name is typically __name__)."""
    return StructuredLogger(name)


# --- Setup Functions ---


def setup_logging(
    level: str | None = None,
    format: str | None = None,
    log_file: str | None = None,
    service_name: str | None = None,
    service_version: str | None = None,
    environment: str | None = None,
) -> None:
    """
    Configure the sector_mapping_server logger tree.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log format (json or text)
        log_file: Optional file path for log output (always JSON)
        service_name: Service name for log records
        service_version: Service version for log records
        environment: Environment name (development, staging, production)

    Call this once at application startup.
    """
    config = _config

    if level:
        config.level = level.upper()
    if format:
        config.format = format
    if log_file:
        config.file_path = log_file

    set_service_metadata(
        name=service_name or config.service_name,
        version=service_version or "0.1.0",
        environment=environment or config.environment,
    )

    root_logger = logging.getLogger(LOGGER_ROOT)
    root_logger.setLevel(getattr(logging, config.level, logging.INFO))
    root_logger.handlers.clear()

    if config.format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = TextFormatter(use_colors=True)

    # stdout belongs to the MCP stdio transport
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if config.file_path:
        file_path = Path(config.file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            file_path, maxBytes=config.max_size_mb * 1024 * 1024, backupCount=config.retention_count
        )
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def setup_logging_from_config() -> None:
    """Configure logging from the validated LoggingConfig."""
    from ..config import get_logging_config, get_server_config

    logging_config = get_logging_config()
    server_config = get_server_config()

    setup_logging(
        level=logging_config.log_level,
        format=logging_config.log_format,
        log_file=logging_config.log_file,
        service_name=logging_config.service_name,
        service_version=server_config.version,
        environment=logging_config.environment,
    )


# --- Decorators ---

F = TypeVar("F", bound=Callable[..., Any])


def log_tool_call(func: F) -> F:
    """
    Decorator to log MCP tool calls with timing and context.

    Usage:
        @log_tool_call
        async def my_tool(request: MyRequest, ctx: Context) -> dict:
            ...
    """
    logger = get_logger(func.__module__)

    @wraps(func)
    async def wrapper(*args, **kwargs):
        tool_name = func.__name__

        session_id = None
        for arg in list(args) + list(kwargs.values()):
            if hasattr(arg, "request_context"):
                session_id = getattr(arg.request_context, "session_id", None)
                break

        set_request_context(
            request_id=generate_request_id(), session_id=session_id, operation=tool_name
        )

        input_summary = {}
        for arg in list(args) + list(kwargs.values()):
            if hasattr(arg, "model_dump"):
                input_summary = sanitize_dict(arg.model_dump())
                break

        logger.info(f"Tool invoked: {tool_name}", data={"input_preview": input_summary})
        start_time = time.perf_counter()

        try:
            result = await func(*args, **kwargs)
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            logger.info(
                f"Tool completed: {tool_name}", data={"latency_ms": latency_ms, "success": True}
            )
            return result

        except Exception as e:
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            logger.exception(
                f"Tool failed: {tool_name}",
                data={
                    "latency_ms": latency_ms,
                    "error_type": type(e).__name__,
                    "error_message": str(e)[:200],
                },
            )
            raise

        finally:
            clear_request_context()

    return wrapper  # type: ignore


# --- Startup/Shutdown Logging ---


def log_server_start(config: dict[str, Any]) -> None:
    """Log server startup with a configuration summary."""
    logger = get_logger(f"{LOGGER_ROOT}.server")
    logger.info(
        "Sector Mapping Server starting",
        data={"config": sanitize_dict(config), "log_level": _config.level},
    )


def log_server_ready(stats: dict[str, Any]) -> None:
    """Log server ready with reference data statistics."""
    logger = get_logger(f"{LOGGER_ROOT}.server")
    logger.info(
        "Sector Mapping Server ready",
        data={
            "ateco_codes": stats.get("ateco_codes", 0),
            "sector_mappings": stats.get("sector_mappings", 0),
            "damodaran_industries": stats.get("damodaran_industries", 0),
        },
    )


def log_server_shutdown() -> None:
    """Log server shutdown."""
    get_logger(f"{LOGGER_ROOT}.server").info("Sector Mapping Server shutting down")
