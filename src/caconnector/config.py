"""
Connector configuration and environment variables.

This module unifies configuration using pydantic-settings.
Variables can come from:
1. .env file
2. System environment variables (have priority)
3. Default values

Naming convention:
- In Python code: snake_case (aad_app_id)
- In .env or ENV vars: UPPER_CASE (AAD_APP_ID)
- Pydantic automatically converts between both
"""

from functools import lru_cache
from typing import Literal
from urllib.parse import quote

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from caconnector.exceptions import ConfigurationError
from caconnector.models.auth import Credential

AuthBackend = Literal["modern", "legacy"]
DirectoryApi = Literal["aad_graph", "ms_graph"]


class Settings(BaseSettings):
    """
    Unified connector configuration.

    All variables can be defined in:
    - .env file: VARIABLE_NAME=value
    - Environment variables: export VARIABLE_NAME=value

    Example:
        # In .env or as environment variable:
        AAD_APP_ID=00000000-0000-0000-0000-000000000000
        AAD_APP_KEY=secret
        TENANT=contoso.onmicrosoft.com
        PROVIDER_NAME_AND_VERSION=ContosoCA/1.0
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allows using uppercase or lowercase
        extra="ignore",  # Ignores extra variables in .env
    )

    # ============================================================================
    # APPLICATION CREDENTIALS
    # ============================================================================
    aad_app_id: str = Field(default="", description="Application (client) ID")
    aad_app_key: SecretStr = Field(
        default=SecretStr(""), description="Application (client) secret"
    )
    tenant: str = Field(
        default="", description="Tenant identifier, e.g. contoso.onmicrosoft.com"
    )

    # ============================================================================
    # IDENTITY AUTHORITY SETTINGS
    # ============================================================================
    auth_authority: str = Field(
        default="https://login.microsoftonline.com/",
        description="Identity authority base URL (tenant is appended)",
    )
    auth_backend: AuthBackend = Field(
        default="modern",
        description="Identity backend used to acquire tokens (modern, legacy)",
    )

    # ============================================================================
    # SERVICE DISCOVERY SETTINGS
    # ============================================================================
    intune_app_id: str = Field(
        default="0000000a-0000-0000-c000-000000000000",
        description="Application ID whose service endpoints are looked up",
    )
    intune_resource_url: str = Field(
        default="https://api.manage.microsoft.com/",
        description="Resource URL tokens are requested for on business calls",
    )
    directory_api: DirectoryApi = Field(
        default="aad_graph",
        description="Directory flavour used for endpoint discovery",
    )
    graph_api_version: str = Field(default="1.6", description="AAD Graph API version")
    graph_resource_url: str = Field(
        default="https://graph.windows.net/", description="AAD Graph resource URL"
    )
    ms_graph_api_version: str = Field(
        default="1.0", description="Microsoft Graph API version"
    )
    ms_graph_resource_url: str = Field(
        default="https://graph.microsoft.com/",
        description="Microsoft Graph resource URL",
    )

    # ============================================================================
    # BUSINESS SERVICE SETTINGS
    # ============================================================================
    scep_service_version: str = Field(
        default="2018-02-20", description="API version of the SCEP validation service"
    )
    revocation_service_version: str = Field(
        default="5019-05-05", description="API version of the PKI connector service"
    )
    provider_name_and_version: str = Field(
        default="",
        description="Caller identification sent as UserAgent (e.g. ContosoCA/1.0)",
    )

    # ============================================================================
    # TRANSPORT SETTINGS
    # ============================================================================
    proxy_host: str | None = Field(default=None, description="HTTP proxy host")
    proxy_port: int | None = Field(default=None, description="HTTP proxy port")
    proxy_user: str | None = Field(default=None, description="HTTP proxy user")
    proxy_pass: SecretStr | None = Field(
        default=None, description="HTTP proxy password"
    )
    http_timeout_seconds: float = Field(
        default=30.0, description="Connect/read timeout for every outbound call"
    )

    # ============================================================================
    # LOGGING SETTINGS
    # ============================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(
        default="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | correlation_id={extra[correlation_id]} | transaction_id={extra[transaction_id]} | {name}:{function}:{line} - {message}",  # noqa: E501
        description="Log format",
    )
    logger_enqueue: bool = Field(
        default=False, description="Enqueue logs using multiprocessing"
    )
    log_serialize: bool = Field(
        default=False, description="Emit log records as JSON lines"
    )

    # ============================================================================
    # HELPER METHODS
    # ============================================================================

    def validate_required(self) -> None:
        """
        Check that the configuration is usable by a client.

        Raises:
            ConfigurationError: If a required value is missing or the proxy
                settings are inconsistent.
        """
        if not self.aad_app_id:
            raise ConfigurationError("The setting 'AAD_APP_ID' is missing")
        if not self.aad_app_key.get_secret_value():
            raise ConfigurationError("The setting 'AAD_APP_KEY' is missing")
        if not self.tenant:
            raise ConfigurationError("The setting 'TENANT' is missing")
        if not self.provider_name_and_version.strip():
            raise ConfigurationError(
                "The setting 'PROVIDER_NAME_AND_VERSION' is missing"
            )

        if self.proxy_host and self.proxy_port is None:
            raise ConfigurationError(
                "If the setting 'PROXY_HOST' is set then 'PROXY_PORT' must also be set."
            )
        if self.proxy_port is not None and not self.proxy_host:
            raise ConfigurationError(
                "If the setting 'PROXY_PORT' is set then 'PROXY_HOST' must also be set."
            )
        if self.proxy_port is not None and not 0 <= self.proxy_port <= 65535:
            raise ConfigurationError(
                "'PROXY_PORT' must be in the range of available ports 0-65535"
            )

        has_pass = self.proxy_pass is not None and self.proxy_pass.get_secret_value()
        if self.proxy_user and not has_pass:
            raise ConfigurationError(
                "If the setting 'PROXY_USER' is set then 'PROXY_PASS' must also be set."
            )
        if has_pass and not self.proxy_user:
            raise ConfigurationError(
                "If the setting 'PROXY_PASS' is set then 'PROXY_USER' must also be set."
            )

    def proxy_url(self) -> str | None:
        """
        Get the proxy URL for outbound HTTP calls.

        Returns:
            str | None: ``http://[user:pass@]host:port`` or None when no proxy is set.
        """
        if not self.proxy_host or self.proxy_port is None:
            return None
        auth = ""
        if self.proxy_user and self.proxy_pass is not None:
            auth = (
                f"{quote(self.proxy_user, safe='')}:"
                f"{quote(self.proxy_pass.get_secret_value(), safe='')}@"
            )
        return f"http://{auth}{self.proxy_host}:{self.proxy_port}"

    def to_credential(self) -> Credential:
        """
        Build the immutable client credential from these settings.

        Returns:
            Credential: Credential for the identity backends.
        """
        self.validate_required()
        return Credential(
            client_id=self.aad_app_id,
            client_secret=self.aad_app_key,
            tenant=self.tenant,
            authority_url=self.auth_authority,
        )


# ============================================================================
# SINGLETON PATTERN - Global settings instance
# ============================================================================


@lru_cache
def get_settings() -> Settings:
    """
    Get connector settings (LRU cached).

    This function is cached, so the .env file is only read once.
    To refresh the configuration, clear the cache:
        get_settings.cache_clear()

    Usage:
        from caconnector.config import get_settings
        settings = get_settings()
        client = ScepValidationClient.from_settings(settings)

    Returns:
        Settings: Connector configuration instance.
    """
    return Settings()


# Global instance for modules that configure themselves on import (logging)
settings = get_settings()
