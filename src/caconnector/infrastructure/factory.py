"""
Token provider factory for identity backend selection.

Selects the token provider implementation based on configuration:
- modern: MSAL ConfidentialClientApplication
- legacy: v1 ``/oauth2/token`` client-credentials grant

Usage:
    from caconnector.infrastructure import TokenProviderFactory
    from caconnector.config import get_settings

    # Option 1: From settings
    factory = TokenProviderFactory.from_settings(get_settings())

    # Option 2: Manual configuration
    factory = TokenProviderFactory(credential, backend="legacy")

    token_provider = factory.get_token_provider()
"""

from typing import TYPE_CHECKING, Literal

import httpx
from loguru import logger

from caconnector.domain.services.token_provider import TokenProvider
from caconnector.exceptions import ConfigurationError
from caconnector.models.auth import Credential

if TYPE_CHECKING:
    from caconnector.config import Settings

TokenBackend = Literal["modern", "legacy"]


class TokenProviderFactory:
    """
    Factory for creating token provider instances.

    The backend is fixed at construction time; callers only ever see the
    TokenProvider interface.
    """

    def __init__(
        self,
        credential: Credential,
        backend: TokenBackend = "modern",
        *,
        proxy_url: str | None = None,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ):
        """
        Initialize token provider factory.

        Args:
            credential: Client credential and tenant
            backend: Identity backend ("modern", "legacy")
            proxy_url: Optional HTTP proxy for calls to the authority
            timeout: Timeout in seconds for calls to the authority
            http_client: Client shared with the legacy backend

        Raises:
            ConfigurationError: If backend is not supported
        """
        if backend not in ("modern", "legacy"):
            raise ConfigurationError(f"Unsupported identity backend: {backend}")

        self.credential = credential
        self.backend = backend
        self.proxy_url = proxy_url
        self.timeout = timeout
        self.http_client = http_client

        logger.info(f"Initialized TokenProviderFactory with backend: {backend}")

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        http_client: httpx.Client | None = None,
    ) -> "TokenProviderFactory":
        """
        Create factory from Settings object.

        Args:
            settings: Connector settings from config.py
            http_client: Client shared with the legacy backend

        Returns:
            TokenProviderFactory configured from settings

        Raises:
            ConfigurationError: If required settings are missing
        """
        return cls(
            credential=settings.to_credential(),
            backend=settings.auth_backend,
            proxy_url=settings.proxy_url(),
            timeout=settings.http_timeout_seconds,
            http_client=http_client,
        )

    def get_token_provider(self) -> TokenProvider:
        """
        Get token provider for configured backend.

        Returns:
            TokenProvider implementation
        """
        if self.backend == "modern":
            from caconnector.infrastructure.providers.modern_authority import (
                ModernAuthorityTokenProvider,
            )

            return ModernAuthorityTokenProvider(
                credential=self.credential,
                proxy_url=self.proxy_url,
                timeout=self.timeout,
            )

        from caconnector.infrastructure.providers.legacy_authority import (
            LegacyAuthorityTokenProvider,
        )

        return LegacyAuthorityTokenProvider(
            credential=self.credential,
            http_client=self.http_client,
            timeout=self.timeout,
        )
