# src/service_client/error_handler.py

import errno
import json
import re
from typing import Any, Optional

import requests
from requests.exceptions import RequestException, Timeout
from urllib3.exceptions import ReadTimeoutError

from .exceptions import (
    BadGatewayError,
    GatewayTimeoutError,
    NotFoundError,
    create_http_error,
)

TIMEOUT_MESSAGE = re.compile(r"timeout of [0-9]+ms exceeded")

# Нет ответа от апстрима (например, connection refused) - считаем 5xx
NO_RESPONSE_STATUS = 999


def response_status(error: BaseException) -> Optional[int]:
    """HTTP статус из ошибки requests, None если ответа нет."""
    response = getattr(error, 'response', None)
    if response is None:
        return None
    return response.status_code


def response_data(response: Optional[requests.Response]) -> Any:
    """Тело ответа: JSON если парсится, иначе текст."""
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def is_body_timeout(error: BaseException) -> bool:
    """
    Таймаут при чтении тела ответа.

    requests сообщает о нем как ConnectionError(ReadTimeoutError), а не Timeout.
    """
    return (
        isinstance(error, requests.exceptions.ConnectionError)
        and bool(error.args)
        and isinstance(error.args[0], ReadTimeoutError)
    )


def is_timeout(error: BaseException) -> bool:
    """Проверяет, что ошибка означает таймаут запроса."""
    if isinstance(error, Timeout):
        return True
    if is_body_timeout(error):
        return True
    if getattr(error, 'code', None) == 'ETIMEDOUT':
        return True
    if getattr(error, 'errno', None) == errno.ETIMEDOUT:
        return True
    return bool(TIMEOUT_MESSAGE.search(str(error)))


class ErrorHandler:
    """
    Трансляторы ошибок для response интерсепторов.

    Каждый метод вызывается с исключением и всегда выбрасывает исключение:
    либо переведенное в HTTPError (оригинал в __cause__), либо исходное.
    Ошибки, которые не являются ошибками requests (например, уже переведенные
    предыдущим транслятором), пропускаются как есть.
    """

    @staticmethod
    def translate_5xx(error: Exception) -> None:
        """Таймаут -> 504 Gateway Timeout, 5xx или нет ответа -> 502 Bad Gateway"""

        if is_timeout(error):
            raise GatewayTimeoutError() from error

        if isinstance(error, RequestException):
            status = response_status(error)
            if (status or NO_RESPONSE_STATUS) >= 500:
                raise BadGatewayError() from error

        raise error

    @staticmethod
    def translate_404(error: Exception) -> None:
        """404 -> Not Found"""

        if isinstance(error, RequestException) and response_status(error) == 404:
            raise NotFoundError() from error

        raise error

    @staticmethod
    def translate_auth(error: Exception) -> None:
        """401/403 -> Unauthorized/Forbidden с телом ответа в сообщении"""

        if isinstance(error, RequestException):
            status = response_status(error)
            if status in (401, 403):
                body = json.dumps(response_data(error.response))
                raise create_http_error(status, body) from error

        raise error
