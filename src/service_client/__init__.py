"""Service Client - builder for outbound HTTP clients between internal services."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .builder import ClientBuilder, ClientBuilderParams, ClientLogger
from .client import ServiceSession, RequestConfig
from .config import ClientConfig, DEFAULT_TIMEOUT_MS, deep_merge
from .interceptors import Interceptor, InterceptorChain
from .auth import StaticAuthorization, DynamicAuthorization
from .settings import ServiceClientSettings, load_settings
from .exceptions import (
    ServiceClientException,
    HTTPError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    BadGatewayError,
    GatewayTimeoutError,
    RequestTimeoutError,
    ClientBuilderError,
    create_http_error,
)

# Set up logging - add NullHandler to prevent "No handler found" warnings
# Users can configure logging themselves using logging.getLogger('service_client')
logging.getLogger('service_client').addHandler(logging.NullHandler())

try:
    __version__ = version("service-client-builder")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Core
    "ClientBuilder",
    "ClientBuilderParams",
    "ClientLogger",
    "ServiceSession",
    "RequestConfig",

    # Config
    "ClientConfig",
    "DEFAULT_TIMEOUT_MS",
    "deep_merge",
    "ServiceClientSettings",
    "load_settings",

    # Interceptors
    "Interceptor",
    "InterceptorChain",

    # Auth
    "StaticAuthorization",
    "DynamicAuthorization",

    # Exceptions
    "ServiceClientException",
    "HTTPError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "BadGatewayError",
    "GatewayTimeoutError",
    "RequestTimeoutError",
    "ClientBuilderError",
    "create_http_error",

    # Version
    "__version__",
]
