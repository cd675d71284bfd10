"""
Log filters for adding context to log records.

Provides filters for trace ids and static extra fields.
"""

import logging
import threading
from typing import Dict, Any, Optional


# Thread-local storage for trace ID
_trace_id_storage = threading.local()


def set_trace_id(trace_id: str) -> None:
    """
    Set trace ID for current thread.

    Example:
        >>> set_trace_id("trace-12345")
        >>> logger.info({"event": "orders-request"})  # Will include trace_id
    """
    _trace_id_storage.value = trace_id


def get_trace_id() -> Optional[str]:
    """Get trace ID for current thread, None if not set."""
    return getattr(_trace_id_storage, 'value', None)


def clear_trace_id() -> None:
    """Clear trace ID for current thread."""
    if hasattr(_trace_id_storage, 'value'):
        delattr(_trace_id_storage, 'value')


class TraceIdFilter(logging.Filter):
    """
    Filter that adds the current thread's trace ID to log records.

    Example:
        >>> handler.addFilter(TraceIdFilter())
        >>> set_trace_id("trace-12345")
        >>> logger.info({"event": "orders-request"})  # trace_id=trace-12345
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add trace ID to record if present."""
        trace_id = get_trace_id()
        if trace_id:
            record.trace_id = trace_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Filter that adds extra static fields to all log records.

    Useful for adding environment, service name, version, etc.

    Example:
        >>> handler.addFilter(ExtraFieldsFilter({"environment": "production"}))
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = extra_fields

    def filter(self, record: logging.LogRecord) -> bool:
        """Add extra fields to record."""
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
