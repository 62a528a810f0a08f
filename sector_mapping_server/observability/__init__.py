"""
Observability module for the Sector Mapping Server.
"""

from .logging import (
    LogConfig,
    clear_request_context,
    generate_request_id,
    get_logger,
    get_request_context,
    log_server_ready,
    log_server_shutdown,
    log_server_start,
    log_tool_call,
    sanitize_dict,
    sanitize_text,
    set_request_context,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    # Logging
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
    "set_request_context",
    "clear_request_context",
    "get_request_context",
    "generate_request_id",
    "sanitize_text",
    "sanitize_dict",
    "log_tool_call",
    "log_server_start",
    "log_server_ready",
    "log_server_shutdown",
    "LogConfig",
]
