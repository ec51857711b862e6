"""
Shared wiring for the business service clients.

Builds the dispatcher stack (http client, token provider, endpoint
resolver, dispatcher) from settings and owns the http client it created.
"""

from typing import Self

import httpx

from caconnector.config import Settings
from caconnector.core.http_client import build_http_client
from caconnector.exceptions import InvalidArgumentError
from caconnector.infrastructure.factory import TokenProviderFactory
from caconnector.services.dispatcher import RequestDispatcher
from caconnector.services.endpoint_resolver import EndpointResolver


def build_dispatcher(
    settings: Settings,
    http_client: httpx.Client | None = None,
) -> tuple[RequestDispatcher, httpx.Client | None]:
    """
    Assemble a RequestDispatcher from settings.

    Args:
        settings: Connector settings (validated here)
        http_client: Client to use; when omitted one is built and returned
            as owned so the caller can close it

    Returns:
        (dispatcher, owned_client) where owned_client is None if the
        http client was supplied by the caller

    Raises:
        ConfigurationError: If the settings are incomplete
    """
    settings.validate_required()

    owned = None
    if http_client is None:
        http_client = owned = build_http_client(settings)

    try:
        token_provider = TokenProviderFactory.from_settings(
            settings, http_client=http_client
        ).get_token_provider()

        resolver = EndpointResolver(
            tenant=settings.tenant,
            token_provider=token_provider,
            http_client=http_client,
            app_id=settings.intune_app_id,
            directory_api=settings.directory_api,
            graph_resource_url=settings.graph_resource_url,
            graph_api_version=settings.graph_api_version,
            ms_graph_resource_url=settings.ms_graph_resource_url,
            ms_graph_api_version=settings.ms_graph_api_version,
        )

        dispatcher = RequestDispatcher(
            endpoint_resolver=resolver,
            token_provider=token_provider,
            http_client=http_client,
            resource_url=settings.intune_resource_url,
        )
    except Exception:
        if owned is not None:
            owned.close()
        raise
    return dispatcher, owned


class ServiceClient:
    """Base for clients bound to one management service."""

    SERVICE_NAME: str = ""
    DEFAULT_SERVICE_VERSION: str = ""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        provider_name_and_version: str,
        service_version: str | None = None,
        owned_http_client: httpx.Client | None = None,
    ):
        """
        Initialize the client.

        Args:
            dispatcher: Dispatcher used for every request
            provider_name_and_version: Caller identification (e.g. ContosoCA/1.0)
            service_version: API version override
            owned_http_client: Client closed by ``close()``

        Raises:
            InvalidArgumentError: If provider_name_and_version is empty
        """
        if not provider_name_and_version or not provider_name_and_version.strip():
            raise InvalidArgumentError(
                "The argument 'provider_name_and_version' is missing"
            )

        self.dispatcher = dispatcher
        self.provider_name_and_version = provider_name_and_version
        self.service_version = service_version or self.DEFAULT_SERVICE_VERSION
        self.additional_headers = {"UserAgent": provider_name_and_version}
        self._owned_http_client = owned_http_client

    @classmethod
    def _from_settings(
        cls,
        settings: Settings,
        http_client: httpx.Client | None,
        service_version: str,
    ) -> Self:
        dispatcher, owned = build_dispatcher(settings, http_client)
        try:
            return cls(
                dispatcher,
                provider_name_and_version=settings.provider_name_and_version,
                service_version=service_version,
                owned_http_client=owned,
            )
        except Exception:
            if owned is not None:
                owned.close()
            raise

    def close(self) -> None:
        """Close the http client if this instance created it."""
        if self._owned_http_client is not None:
            self._owned_http_client.close()
            self._owned_http_client = None

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
