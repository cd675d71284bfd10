"""
Система конфигурации для Service Client.

Конфиг клиента - это mapping настроек, который deep-merge'ится поверх
значений по умолчанию и замораживается в ClientConfig (frozen dataclass).
"""

import logging
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 3000

# Миллисекунды: одно значение или пара (connect, read), как в requests
TimeoutMs = Union[None, float, Tuple[Optional[float], Optional[float]]]


def timeout_to_seconds(timeout: TimeoutMs) -> Union[None, float, Tuple[Optional[float], ...]]:
    """
    Переводит таймаут из миллисекунд в секунды для requests.

    0 и None означают отсутствие таймаута; пара (connect, read)
    переводится поэлементно.

    Examples:
        >>> timeout_to_seconds(2500)
        2.5
        >>> timeout_to_seconds((500, 0))
        (0.5, None)
    """
    if isinstance(timeout, tuple):
        return tuple(_ms_to_seconds(part) for part in timeout)
    return _ms_to_seconds(timeout)


def _ms_to_seconds(value: Optional[float]) -> Optional[float]:
    if not value:
        return None
    return value / 1000


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Рекурсивное слияние словарей (deep merge).

    Значения из override побеждают на совпадающих ключах, вложенные словари
    сливаются по ключам, а не заменяются целиком.

    Args:
        base: Базовый словарь
        override: Словарь с переопределениями

    Returns:
        Новый словарь с объединенными значениями

    Example:
        >>> base = {"timeout": 3000, "headers": {"User-Agent": "svc"}}
        >>> override = {"headers": {"Accept": "application/json"}}
        >>> deep_merge(base, override)
        {'timeout': 3000, 'headers': {'User-Agent': 'svc', 'Accept': 'application/json'}}
    """
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def default_config(agent: Optional[str] = None, trace_id: Optional[str] = None) -> Dict[str, Any]:
    """Defaults every built client starts from: 3s timeout plus identity headers."""
    headers: Dict[str, str] = {}
    if trace_id:
        headers["Trace-Id"] = trace_id
    if agent:
        headers["User-Agent"] = agent
    return {"timeout": DEFAULT_TIMEOUT_MS, "headers": headers}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CLIENT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ClientConfig:
    """
    Конфигурация клиента.

    Args:
        timeout: Таймаут запроса в миллисекундах (0 или None - без таймаута),
                 либо пара (connect, read)
        headers: Заголовки по умолчанию для всех запросов
        base_url: Базовый URL для относительных путей
        verify: Проверка SSL сертификатов
        proxies: Прокси {'http': ..., 'https': ...}
        max_redirects: Максимум редиректов

    Examples:
        >>> ClientConfig(timeout=5000, base_url="https://api.example.com")
        >>> ClientConfig.from_mapping({"timeout": 1000, "headers": {"Accept": "text/plain"}})
    """
    timeout: TimeoutMs = DEFAULT_TIMEOUT_MS
    headers: Mapping[str, str] = field(default_factory=dict)
    base_url: Optional[str] = None
    verify: bool = True
    proxies: Mapping[str, str] = field(default_factory=dict)
    max_redirects: int = 30

    def __post_init__(self):
        """Валидация."""
        parts = self.timeout if isinstance(self.timeout, tuple) else (self.timeout,)
        if isinstance(self.timeout, tuple) and len(parts) != 2:
            raise ValueError("timeout tuple must be (connect, read)")
        if any(part is not None and part < 0 for part in parts):
            raise ValueError("timeout must be non-negative")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be non-negative")

        # Immutable mappings
        object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))
        object.__setattr__(self, 'proxies', MappingProxyType(dict(self.proxies)))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ClientConfig":
        """
        Build config from a (merged) mapping.

        Unknown keys are ignored with a warning.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning("Ignoring unknown client config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in values.items() if k in known})
