"""
Иерархия исключений Service Client.

Классификация:
- HTTPError и подклассы - нормализованные HTTP ошибки (message + status_code),
  которые видит вызывающий код после трансляции
- RequestTimeoutError - таймаут транспорта (остается ошибкой requests)
- ClientBuilderError - ошибка конфигурации билдера
"""

from http import HTTPStatus
from typing import Dict, Optional, Type

import requests

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ServiceClientException(Exception):
    """Базовое исключение Service Client."""

    def __init__(self, message: str, **kwargs):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HTTP ОШИБКИ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPError(ServiceClientException):
    """
    Базовая HTTP ошибка.

    Args:
        status_code: HTTP статус
        message: Сообщение (по умолчанию - стандартная reason phrase статуса)
    """

    status_code: int = 500

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        if status_code is not None:
            self.status_code = status_code
        if message is None:
            message = _reason_phrase(self.status_code)
        super().__init__(message)

    @property
    def expose(self) -> bool:
        """Client errors are safe to show to end users, server errors are not."""
        return self.status_code < 500

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code})"

class UnauthorizedError(HTTPError):
    """401 Unauthorized."""
    status_code = 401

class ForbiddenError(HTTPError):
    """403 Forbidden."""
    status_code = 403

class NotFoundError(HTTPError):
    """404 Not Found."""
    status_code = 404

class BadGatewayError(HTTPError):
    """502 Bad Gateway."""
    status_code = 502

class GatewayTimeoutError(HTTPError):
    """504 Gateway Timeout."""
    status_code = 504

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ТРАНСПОРТ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RequestTimeoutError(requests.exceptions.Timeout):
    """
    Таймаут запроса.

    Остается requests.exceptions.Timeout, поэтому код, который ловит ошибки
    requests, продолжает работать.

    Args:
        timeout: Значение таймаута (мс)
    """

    code = "ECONNABORTED"

    def __init__(self, timeout: Optional[float], *args, **kwargs):
        self.timeout = timeout
        super().__init__(f"timeout of {_format_ms(timeout)}ms exceeded", *args, **kwargs)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# КОНФИГУРАЦИЯ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ClientBuilderError(ServiceClientException):
    """Ошибка конфигурации билдера."""

    def __init__(self, message: str):
        super().__init__(f"ClientBuilderError: {message}")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

HTTP_ERRORS: Dict[int, Type[HTTPError]] = {
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    502: BadGatewayError,
    504: GatewayTimeoutError,
}


def create_http_error(status_code: int, message: Optional[str] = None) -> HTTPError:
    """
    Создать HTTP ошибку по статус коду.

    Args:
        status_code: HTTP статус
        message: Сообщение (по умолчанию - reason phrase)

    Returns:
        Экземпляр зарегистрированного подкласса или HTTPError

    Examples:
        >>> err = create_http_error(404)
        >>> assert isinstance(err, NotFoundError)
        >>> assert err.message == "Not Found"
        >>> create_http_error(418).status_code
        418
    """
    error_class = HTTP_ERRORS.get(status_code)
    if error_class is None:
        return HTTPError(message, status_code=status_code)
    return error_class(message)


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"HTTP {status_code}"


def _format_ms(timeout: Optional[float]) -> str:
    if timeout is None:
        return "0"
    if float(timeout).is_integer():
        return str(int(timeout))
    return str(timeout)
