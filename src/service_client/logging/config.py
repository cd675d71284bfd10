"""
Настройки журнала событий клиента.

StructuredLogger пишет события билдера (<service>-request, <service>-response,
<service>-error) в отдельный logger "service_client.events.<service>",
не затрагивая внутренний logger пакета "service_client".
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

EVENT_LOGGER = "service_client.events"

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
FORMATS = ("json", "text", "colored")


@dataclass(frozen=True)
class LoggingConfig:
    """
    Настройки журнала событий.

    Args:
        service: Имя вызываемого сервиса, добавляется к имени logger'а
        level: Уровень (DEBUG, INFO, WARNING, ERROR, CRITICAL), регистр не важен
        format: json, text или colored
        console: Писать в stdout
        file_path: Путь к файлу журнала (None - без файла); файл ротируется
        max_bytes: Размер файла до ротации
        backup_count: Сколько старых файлов хранить
        mask_sensitive: Маскировать токены и пароли в полях событий
        extra_fields: Статические поля каждой записи (environment, version, ...)

    Example:
        >>> config = LoggingConfig(service="orders", level="debug", format="text")
        >>> config.logger_name
        'service_client.events.orders'
    """

    service: Optional[str] = None
    level: str = "INFO"
    format: str = "json"
    console: bool = True
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    mask_sensitive: bool = True
    extra_fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        level = self.level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {self.level}. Available: {', '.join(LEVELS)}")

        log_format = self.format.lower()
        if log_format not in FORMATS:
            raise ValueError(f"Unknown log format: {self.format}. Available: {', '.join(FORMATS)}")

        if self.max_bytes < 0 or self.backup_count < 0:
            raise ValueError("max_bytes and backup_count must be non-negative")

        object.__setattr__(self, 'level', level)
        object.__setattr__(self, 'format', log_format)
        object.__setattr__(self, 'extra_fields', MappingProxyType(dict(self.extra_fields)))

    @property
    def logger_name(self) -> str:
        if self.service:
            return f"{EVENT_LOGGER}.{self.service}"
        return EVENT_LOGGER

    @property
    def level_number(self) -> int:
        return getattr(logging, self.level)
