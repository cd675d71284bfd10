# src/service_client/utils/sanitizer.py
"""
Утилита для маскирования чувствительных данных в логах.

Поля событий клиента (например, data - тело ответа апстрима) могут содержать
токены и пароли; перед записью в лог они маскируются.
"""

import re
from typing import Any, Dict

# Список чувствительных полей (case-insensitive, частичное совпадение)
SENSITIVE_KEYS = {
    'password', 'passwd', 'secret', 'token', 'api_key', 'apikey',
    'authorization', 'cookie', 'credentials', 'private_key',
}

# Регулярные выражения для обнаружения sensitive данных в строках
SENSITIVE_PATTERNS = [
    # Bearer tokens
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    # Basic auth
    (re.compile(r'(Basic\s+)([A-Za-z0-9+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    # key=value / key: value
    (re.compile(r'(api[_-]?key[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(token[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(password[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
]


def mask_sensitive_data(data: Any, mask: str = "***REDACTED***") -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Args:
        data: Данные для маскирования
        mask: Строка-заменитель

    Returns:
        Копия данных с замаскированными чувствительными полями

    Examples:
        >>> mask_sensitive_data({"user": "alice", "password": "secret123"})
        {'user': 'alice', 'password': '***REDACTED***'}

        >>> mask_sensitive_data("Authorization: Bearer abc.def")
        'Authorization: Bearer ***REDACTED***'
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        result = data
        for pattern, replacement in SENSITIVE_PATTERNS:
            result = pattern.sub(replacement, result)
        return result

    if isinstance(data, dict):
        return _mask_dict(data, mask)

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    return data


def _mask_dict(data: Dict[Any, Any], mask: str) -> Dict[Any, Any]:
    result = {}
    for key, value in data.items():
        if is_sensitive_key(str(key)):
            result[key] = mask
        else:
            result[key] = mask_sensitive_data(value, mask)
    return result


def is_sensitive_key(key: str) -> bool:
    """Проверяет, является ли ключ чувствительным."""
    key = key.lower()
    return any(sensitive in key for sensitive in SENSITIVE_KEYS)


def add_sensitive_keys(*keys: str) -> None:
    """
    Добавляет новые чувствительные ключи.

    Examples:
        >>> add_sensitive_keys('internal_token', 'session_id')
    """
    for key in keys:
        SENSITIVE_KEYS.add(key.lower())
