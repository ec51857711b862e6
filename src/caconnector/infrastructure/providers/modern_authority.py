"""
Token provider for the modern (v2) identity authority.

Wraps MSAL's ConfidentialClientApplication to obtain application (client
credentials) tokens for scope-based resources.
"""

import threading
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import msal

from caconnector.core.logging import logger
from caconnector.domain.services.token_provider import TokenProvider, to_scopes
from caconnector.exceptions import AuthenticationUnavailableError
from caconnector.models.auth import Credential, Token


class ModernAuthorityTokenProvider(TokenProvider):
    """
    MSAL-backed token provider.

    MSAL keeps an in-memory token cache per application object, so repeated
    calls for the same scopes are answered locally until the token expires.
    """

    def __init__(
        self,
        credential: Credential,
        proxy_url: str | None = None,
        timeout: float = 30.0,
    ):
        """
        Initializes the provider.

        Args:
            credential: Client credential and tenant
            proxy_url: Optional HTTP proxy for calls to the authority
            timeout: Timeout in seconds for calls to the authority
        """
        self.credential = credential
        self.proxy_url = proxy_url
        self.timeout = timeout
        self._app: msal.ConfidentialClientApplication | None = None
        self._app_lock = threading.Lock()

    @property
    def backend_name(self) -> str:
        """Provider identifier."""
        return "modern"

    def _get_app(self) -> msal.ConfidentialClientApplication:
        # Built lazily: MSAL may contact the authority during construction.
        with self._app_lock:
            if self._app is None:
                proxies = (
                    {"http": self.proxy_url, "https": self.proxy_url}
                    if self.proxy_url
                    else None
                )
                self._app = msal.ConfidentialClientApplication(
                    client_id=self.credential.client_id,
                    client_credential=self.credential.client_secret.get_secret_value(),
                    authority=self.credential.authority,
                    proxies=proxies,
                    timeout=self.timeout,
                )
            return self._app

    def get_token(self, resource_or_scopes: str | Sequence[str]) -> Token:
        """
        Acquires a token for the given scopes.

        Args:
            resource_or_scopes: Scopes, or a resource URL which is turned into
                ``<resource>/.default``

        Returns:
            Token for the scopes

        Raises:
            InvalidArgumentError: If no scope was given
            AuthenticationUnavailableError: If MSAL fails or returns no token
        """
        scopes = to_scopes(resource_or_scopes)

        try:
            result = self._get_app().acquire_token_for_client(scopes=scopes)
        except Exception as e:
            logger.error(f"Token acquisition for {scopes} failed: {e}")
            raise AuthenticationUnavailableError(
                f"Identity authority unreachable: {e}"
            ) from e

        if not result or "access_token" not in result:
            error = (result or {}).get("error", "no_result")
            description = (result or {}).get("error_description", "")
            logger.error(f"Failed to acquire token: {error}: {description}")
            raise AuthenticationUnavailableError(
                f"Failed to acquire token: {error}: {description}"
            )

        expires_on = None
        if result.get("expires_in") is not None:
            expires_on = datetime.now(UTC) + timedelta(seconds=int(result["expires_in"]))

        return Token(
            access_token=result["access_token"],
            token_type=result.get("token_type") or "Bearer",
            expires_on=expires_on,
        )
