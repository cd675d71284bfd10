"""
Client configuration from environment variables and .env files.

Reads:
1. Environment variables (SERVICE_CLIENT_*)
2. .env file
3. Defaults

Example .env file:
    SERVICE_CLIENT_BASE_URL=https://orders.internal
    SERVICE_CLIENT_TIMEOUT=5000
    SERVICE_CLIENT_AGENT=billing-service/1.4
    SERVICE_CLIENT_VERIFY=true
"""

from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import DEFAULT_TIMEOUT_MS


class ServiceClientSettings(BaseSettings):
    """
    Client settings from environment variables.

    Usage:
        >>> settings = ServiceClientSettings()
        >>> settings.to_config()
        {'timeout': 3000.0, 'verify': True}
    """

    model_config = SettingsConfigDict(
        env_prefix='SERVICE_CLIENT_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    base_url: Optional[str] = Field(default=None, description="Base URL for relative paths")
    timeout: float = Field(default=DEFAULT_TIMEOUT_MS, ge=0, description="Request timeout in milliseconds")
    agent: Optional[str] = Field(default=None, description="User-Agent header")
    verify: bool = Field(default=True, description="Verify SSL certificates")

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Empty string means no base URL; otherwise require http(s)."""
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got {v!r}")
        return v

    def to_config(self) -> Dict[str, Any]:
        """Client config mapping (agent is passed to the builder separately)."""
        config: Dict[str, Any] = {"timeout": self.timeout, "verify": self.verify}
        if self.base_url:
            config["base_url"] = self.base_url
        return config


def load_settings(env_file: Optional[str] = None) -> ServiceClientSettings:
    """
    Load settings, optionally from a specific .env file.

    Example:
        >>> settings = load_settings(".env.production")
    """
    if env_file is None:
        return ServiceClientSettings()
    return ServiceClientSettings(_env_file=env_file)
