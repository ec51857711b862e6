"""
Token provider for the legacy (v1) identity authority.

Implementation of the OAuth 2.0 client-credentials grant against the
resource-based ``/oauth2/token`` endpoint.
"""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from caconnector.core.logging import logger
from caconnector.domain.services.token_provider import TokenProvider, to_resource
from caconnector.exceptions import AuthenticationUnavailableError
from caconnector.models.auth import Credential, Token


class LegacyAuthorityTokenProvider(TokenProvider):
    """
    Client-credentials token provider for the v1 authority.

    Tokens are requested per resource (``resource=https://graph.windows.net/``)
    rather than per scope.
    """

    TOKEN_PATH = "/oauth2/token"

    def __init__(
        self,
        credential: Credential,
        http_client: httpx.Client | None = None,
        timeout: float = 30.0,
    ):
        """
        Initializes the provider.

        Args:
            credential: Client credential and tenant
            http_client: Client to send the token request with. When omitted a
                short-lived client is created per request.
            timeout: Timeout in seconds for the short-lived client
        """
        self.credential = credential
        self.http_client = http_client
        self.timeout = timeout

    @property
    def backend_name(self) -> str:
        """Provider identifier."""
        return "legacy"

    @property
    def token_url(self) -> str:
        """Tenant-qualified token endpoint."""
        return f"{self.credential.authority}{self.TOKEN_PATH}"

    def get_token(self, resource_or_scopes: str | Sequence[str]) -> Token:
        """
        Acquires a token for a resource using the client credential.

        Args:
            resource_or_scopes: Resource URL, or ``<resource>/.default`` scopes

        Returns:
            Token for the resource

        Raises:
            InvalidArgumentError: If no resource was given
            AuthenticationUnavailableError: If the authority is unreachable,
                answers with an error or omits the access token
        """
        resource = to_resource(resource_or_scopes)
        data = {
            "grant_type": "client_credentials",
            "client_id": self.credential.client_id,
            "client_secret": self.credential.client_secret.get_secret_value(),
            "resource": resource,
        }

        try:
            if self.http_client is not None:
                response = self._post(self.http_client, data)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = self._post(client, data)
        except httpx.HTTPError as e:
            logger.error(f"Failed to contact authority {self.token_url}: {e}")
            raise AuthenticationUnavailableError(
                f"Identity authority unreachable: {e}"
            ) from e

        payload = self._decode(response)
        if response.is_error:
            error = payload.get("error", response.reason_phrase)
            description = payload.get("error_description", "")
            logger.error(
                f"Authority returned {response.status_code} for resource "
                f"{resource}: {error} {description}".rstrip()
            )
            raise AuthenticationUnavailableError(
                f"Authentication failed ({response.status_code}): {error} {description}".rstrip()
            )

        access_token = payload.get("access_token")
        if not access_token:
            logger.error("Authentication result was null")
            raise AuthenticationUnavailableError("Authentication result was null")

        return Token(
            access_token=access_token,
            token_type=payload.get("token_type") or "Bearer",
            expires_on=self._expires_on(payload),
        )

    def _post(self, client: httpx.Client, data: dict[str, str]) -> httpx.Response:
        return client.post(
            self.token_url,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}

    @staticmethod
    def _expires_on(payload: dict[str, Any]) -> datetime | None:
        try:
            if payload.get("expires_on") is not None:
                return datetime.fromtimestamp(int(payload["expires_on"]), tz=UTC)
            if payload.get("expires_in") is not None:
                return datetime.now(UTC) + timedelta(seconds=int(payload["expires_in"]))
        except (TypeError, ValueError):
            logger.debug("Ignoring unparseable token expiry")
        return None
