"""
Structured event logging for Service Client.

Example:
    >>> from service_client.logging import get_logger, LoggingConfig
    >>>
    >>> logger = get_logger(LoggingConfig(format="json"), service="orders")
    >>> builder = ClientBuilder(service="orders", logger=logger).add_request_logging()
"""

from .config import LoggingConfig, EVENT_LOGGER
from .logger import StructuredLogger, get_logger
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import (
    TraceIdFilter,
    ExtraFieldsFilter,
    set_trace_id,
    get_trace_id,
    clear_trace_id,
)
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "EVENT_LOGGER",
    # Logger
    "StructuredLogger",
    "get_logger",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "TraceIdFilter",
    "ExtraFieldsFilter",
    "set_trace_id",
    "get_trace_id",
    "clear_trace_id",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
