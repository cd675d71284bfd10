"""
Structured logger for Service Client.

Implements the logger contract expected by ClientBuilder: ``info(record)`` and
``error(record)`` take a flat mapping of fields whose ``event`` key names the
event.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional

from .config import LoggingConfig
from .formatters import get_formatter
from .filters import TraceIdFilter, ExtraFieldsFilter
from .handlers import create_console_handler, create_file_handler
from ..utils.sanitizer import mask_sensitive_data

DEFAULT_EVENT = "service-client-event"


class StructuredLogger:
    """
    Structured event logger on top of the standard logging module.

    Features:
    - Console and rotating file handlers
    - JSON, text and colored output
    - Trace ID and static extra fields
    - Sensitive field masking

    Example:
        >>> logger = StructuredLogger(LoggingConfig(service="orders", format="json"))
        >>> logger.info({"event": "orders-request", "method": "GET", "path": "/orders/1"})
        >>> builder = ClientBuilder(service="orders", logger=logger)
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: Optional[str] = None):
        self.config = config or LoggingConfig()
        self.name = name or self.config.logger_name
        self._closed = False

        level = self.config.level_number
        self._logger = logging.getLogger(self.name)
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Reinitialising with the same name replaces handlers
        self._logger.handlers.clear()

        filters = [TraceIdFilter()]
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format)

        if self.config.console:
            self._logger.addHandler(create_console_handler(
                level=level,
                formatter=formatter,
                filters=filters
            ))

        if self.config.file_path:
            self._logger.addHandler(create_file_handler(
                file_path=self.config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters
            ))

    def _log(self, level: int, record: Mapping[str, Any]) -> None:
        fields: Dict[str, Any] = dict(record)
        event = fields.pop("event", None) or DEFAULT_EVENT
        if self.config.mask_sensitive:
            fields = mask_sensitive_data(fields)
        self._logger.log(level, event, extra={"fields": fields})

    def debug(self, record: Mapping[str, Any]) -> None:
        self._log(logging.DEBUG, record)

    def info(self, record: Mapping[str, Any]) -> None:
        """
        Log an event at info level.

        Example:
            >>> logger.info({"event": "orders-response", "status": 200})
        """
        self._log(logging.INFO, record)

    def warning(self, record: Mapping[str, Any]) -> None:
        self._log(logging.WARNING, record)

    def error(self, record: Mapping[str, Any]) -> None:
        """
        Log an event at error level.

        Example:
            >>> logger.error({"event": "orders-error", "status": 500, "message": "..."})
        """
        self._log(logging.ERROR, record)

    def close(self) -> None:
        """
        Flush and close all handlers.

        Idempotent; safe to call more than once.
        """
        if self._closed:
            return

        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def get_logger(config: Optional[LoggingConfig] = None, service: Optional[str] = None) -> StructuredLogger:
    """
    Create a structured logger, one logger name per service.

    Example:
        >>> logger = get_logger(LoggingConfig(level="DEBUG"), service="orders")
        >>> logger.name
        'service_client.events.orders'
    """
    config = config or LoggingConfig()
    if service:
        config = replace(config, service=service)
    return StructuredLogger(config)
