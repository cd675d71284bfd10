# src/service_client/client.py
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
from requests.structures import CaseInsensitiveDict

from .config import ClientConfig, TimeoutMs, timeout_to_seconds
from .error_handler import is_body_timeout
from .exceptions import RequestTimeoutError
from .interceptors import InterceptorChain

logger = logging.getLogger(__name__)

# Сентинел: timeout не передан в вызов
_UNSET = object()


@dataclass
class RequestConfig:
    """Request as seen by request interceptors.

    Attributes:
        method: HTTP method (upper case)
        url: URL or path exactly as passed by the caller
        base_url: Base URL of the client
        headers: Effective headers (session defaults merged with per-call headers)
        timeout: Timeout in milliseconds (None - no timeout) or a (connect, read) pair
        options: Remaining requests keyword arguments (params, json, data, ...)

    Example:
        >>> def add_header(config: RequestConfig) -> RequestConfig:
        ...     config.headers['X-Request-Source'] = 'batch'
        ...     return config
    """

    method: str
    url: str
    base_url: Optional[str] = None
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    timeout: TimeoutMs = None
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def full_url(self) -> str:
        """
        Строит полный URL из base_url и url.

        Абсолютный URL используется как есть.
        """
        if self.url.startswith(("http://", "https://")) or not self.base_url:
            return self.url
        return f"{self.base_url.rstrip('/')}/{self.url.lstrip('/')}"

    @property
    def timeout_seconds(self):
        """Timeout as requests expects it, None when disabled."""
        return timeout_to_seconds(self.timeout)

    def expired_timeout(self, error: BaseException) -> Optional[float]:
        """Timeout (ms) that ran out: the connect part for ConnectTimeout, otherwise the read part."""
        if not isinstance(self.timeout, tuple):
            return self.timeout
        connect, read = self.timeout
        if isinstance(error, requests.exceptions.ConnectTimeout):
            return connect
        return read


class Interceptors:
    """Request and response interceptor chains of a client."""

    def __init__(self):
        self.request = InterceptorChain()
        self.response = InterceptorChain()


class ServiceSession(requests.Session):
    """
    HTTP клиент на базе requests.Session с цепочками интерсепторов.

    Features:
        - Base URL для относительных путей
        - Таймаут по умолчанию в миллисекундах
        - Request интерсепторы могут менять запрос перед отправкой
        - Response интерсепторы видят ответ или ошибку (4xx/5xx, транспорт)
          и могут транслировать ошибку

    Все методы requests.Session (get, post, put, patch, delete, head, options)
    проходят через цепочки, так как они вызывают request().

    Example:
        >>> client = ServiceSession(ClientConfig(base_url="https://api.example.com"))
        >>> client.interceptors.request.use(lambda config: config)
        >>> response = client.get("/users")
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        super().__init__()
        self.config = config or ClientConfig()
        self.interceptors = Interceptors()

        if self.config.headers:
            self.headers.update(self.config.headers)
        if self.config.proxies:
            self.proxies.update(self.config.proxies)
        self.verify = self.config.verify
        self.max_redirects = self.config.max_redirects

    @property
    def base_url(self) -> Optional[str]:
        """Base URL (read-only)."""
        return self.config.base_url

    @property
    def timeout(self) -> TimeoutMs:
        """Default timeout in milliseconds (read-only)."""
        return self.config.timeout

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Выполняет запрос через цепочки интерсепторов.

        Args:
            method: HTTP метод
            url: Путь (относительно base_url) или полный URL
            **kwargs: Параметры requests; timeout задается в миллисекундах

        Returns:
            Объект Response (с атрибутом config)

        Raises:
            requests.exceptions.HTTPError для 4xx/5xx, ошибки транспорта или
            ошибки, в которые их перевели интерсепторы.
        """
        config = self._prepare_config(method, url, kwargs)

        response = None
        error = None
        try:
            config = self.interceptors.request.run(config)
            response = self._dispatch(config)
        except Exception as exc:
            error = exc

        return self.interceptors.response.run(response, error)

    # ==================== Внутренние методы ====================

    def _prepare_config(self, method: str, url: str, kwargs: Dict[str, Any]) -> RequestConfig:
        options = dict(kwargs)

        headers = CaseInsensitiveDict(self.headers)
        call_headers = options.pop('headers', None)
        if call_headers:
            headers.update(call_headers)

        timeout = options.pop('timeout', _UNSET)
        if timeout is _UNSET:
            timeout = self.config.timeout

        return RequestConfig(
            method=method.upper(),
            url=url,
            base_url=self.config.base_url,
            headers=headers,
            timeout=timeout,
            options=options,
        )

    def _dispatch(self, config: RequestConfig) -> requests.Response:
        try:
            response = super().request(
                config.method,
                config.full_url,
                headers=dict(config.headers),
                timeout=config.timeout_seconds,
                **config.options
            )
            if not response.ok:
                self._release(response)
        except requests.exceptions.RequestException as exc:
            if isinstance(exc, requests.exceptions.Timeout) or is_body_timeout(exc):
                raise RequestTimeoutError(
                    config.expired_timeout(exc),
                    request=exc.request,
                    response=exc.response,
                ) from exc
            raise

        response.config = config
        response.raise_for_status()
        return response

    @staticmethod
    def _release(response: requests.Response) -> None:
        """Загружает тело ответа с ошибкой и возвращает соединение в пул."""
        # error.response остается читаемым после close()
        response.content
        response.close()
