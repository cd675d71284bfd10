"""Utility modules for Service Client."""

from .sanitizer import (
    mask_sensitive_data,
    add_sensitive_keys,
    is_sensitive_key,
)

__all__ = [
    'mask_sensitive_data',
    'add_sensitive_keys',
    'is_sensitive_key',
]
