# src/service_client/builder.py

import logging
from typing import Any, List, Mapping, Optional, Protocol, TypedDict

import requests

from .auth import AuthHeader, to_authorization
from .client import RequestConfig, ServiceSession
from .config import ClientConfig, deep_merge, default_config
from .error_handler import ErrorHandler, response_data, response_status
from .exceptions import ClientBuilderError
from .interceptors import Interceptor
from .settings import load_settings

logger = logging.getLogger(__name__)


class ClientLogger(Protocol):
    """Logger collaborator: each method takes a flat mapping of fields."""

    def info(self, record: Mapping[str, Any]) -> None: ...

    def error(self, record: Mapping[str, Any]) -> None: ...


class ClientBuilderParams(TypedDict, total=False):
    """Keyword arguments accepted by ClientBuilder (service is required)."""

    service: str
    agent: str
    trace_id: str
    logger: ClientLogger
    config: Mapping[str, Any]


def _passthrough(response: requests.Response) -> requests.Response:
    return response


class ClientBuilder:
    """
    Билдер HTTP клиента для межсервисных вызовов.

    Накапливает поведение через цепочку вызовов и устанавливает интерсепторы
    в build(). Трансляторы ошибок устанавливаются в порядке вызовов методов
    (первый зарегистрированный выполняется первым).

    build() предназначен для однократного вызова: повторный вызов
    зарегистрирует трансляторы ошибок еще раз.

    Example:
        >>> client = (
        ...     ClientBuilder(service="orders", agent="billing/1.0", logger=log,
        ...                   config={"base_url": "https://orders.internal"})
        ...     .add_request_logging()
        ...     .add_authorization(lambda: f"Bearer {tokens.current()}")
        ...     .add_404_error_handling()
        ...     .add_auth_error_handling()
        ...     .add_5xx_error_handling()
        ...     .build()
        ... )
        >>> client.get("/orders/42").json()
    """

    def __init__(
        self,
        service: str,
        agent: Optional[str] = None,
        trace_id: Optional[str] = None,
        logger: Optional[ClientLogger] = None,
        config: Optional[Mapping[str, Any]] = None,
    ):
        """
        Create a client builder with a 3 second timeout and
        User-Agent / Trace-Id headers.

        Args:
            service: Name of the called service, used in log event names
            agent: User-Agent header value
            trace_id: Trace-Id header value
            logger: Logger for add_request_logging()
            config: Client config deep-merged over the defaults
                    (timeout in ms, headers, base_url, verify, proxies, max_redirects)
        """
        merged = deep_merge(default_config(agent=agent, trace_id=trace_id), config or {})
        self.client = ServiceSession(ClientConfig.from_mapping(merged))

        self.service = service
        self.log = logger
        self.error_response_interceptors: List[Interceptor] = []

    @classmethod
    def from_env(cls, service: str, env_file: Optional[str] = None, **params: Any) -> "ClientBuilder":
        """
        Create a builder whose config defaults come from SERVICE_CLIENT_*
        environment variables (or the given .env file).

        Explicit ``config`` and ``agent`` still take priority.
        """
        settings = load_settings(env_file)
        params["config"] = deep_merge(settings.to_config(), params.get("config") or {})
        if settings.agent and not params.get("agent"):
            params["agent"] = settings.agent
        return cls(service=service, **params)

    def add_5xx_error_handling(self) -> "ClientBuilder":
        """Timeouts become 504 Gateway Timeout, other 5xx become 502 Bad Gateway"""
        self.error_response_interceptors.append(
            Interceptor(fulfilled=_passthrough, rejected=ErrorHandler.translate_5xx)
        )
        return self

    def add_404_error_handling(self) -> "ClientBuilder":
        """404 responses are raised as NotFoundError"""
        self.error_response_interceptors.append(
            Interceptor(fulfilled=_passthrough, rejected=ErrorHandler.translate_404)
        )
        return self

    def add_auth_error_handling(self) -> "ClientBuilder":
        """401 and 403 responses are raised with their status and the response body as message"""
        self.error_response_interceptors.append(
            Interceptor(fulfilled=_passthrough, rejected=ErrorHandler.translate_auth)
        )
        return self

    def add_request_logging(self) -> "ClientBuilder":
        """
        Log requests, responses and errors through the configured logger.

        Raises:
            ClientBuilderError: no logger was passed to the builder
        """
        if self.log is None:
            raise ClientBuilderError("No logger configured")

        self.client.interceptors.request.use(self._log_request)
        self.client.interceptors.response.use(self._log_response, self._log_error)
        return self

    def add_authorization(self, auth: AuthHeader) -> "ClientBuilder":
        """
        Add a static or dynamic Authorization header to every request.

        An Authorization header set on the request itself is never overwritten.

        Args:
            auth: Header value, or a function returning it (called per request)
        """
        authorization = to_authorization(auth)

        def authorize(config: RequestConfig) -> RequestConfig:
            if config.headers.get('Authorization'):
                return config
            config.headers['Authorization'] = authorization.resolve()
            return config

        self.client.interceptors.request.use(authorize)
        return self

    def build(self) -> ServiceSession:
        """Install the error handling and return the configured client"""
        if any(handler in self.error_response_interceptors for handler in self.client.interceptors.response):
            logger.debug("build() called again for %s, error handlers are registered twice", self.service)

        for handler in self.error_response_interceptors:
            self.client.interceptors.response.use(handler.fulfilled, handler.rejected)

        logger.debug(
            "Built client for %s with %d error handler(s)",
            self.service,
            len(self.error_response_interceptors),
        )
        return self.client

    # ==================== Логирование ====================

    def _log_request(self, config: RequestConfig) -> RequestConfig:
        self.log.info({
            "event": f"{self.service}-request",
            "method": config.method.upper(),
            "host": config.base_url,
            "path": config.url,
        })
        return config

    def _log_response(self, response: requests.Response) -> requests.Response:
        config = response.config
        self.log.info({
            "event": f"{self.service}-response",
            "method": config.method.upper(),
            "host": config.base_url,
            "path": config.url,
            "status": response.status_code,
        })
        return response

    def _log_error(self, error: Exception) -> None:
        self.log.error({
            "event": f"{self.service}-error",
            "status": response_status(error),
            "message": str(error),
            "data": response_data(getattr(error, 'response', None)),
        })
        raise error
