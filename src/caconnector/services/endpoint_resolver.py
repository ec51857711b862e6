"""
Service endpoint resolution.

Maps logical service names (e.g. ``ScepRequestValidationFEService``) to
physical base URLs using the directory's service endpoint list. The list
is cached in memory and refreshed only when the cache is empty; the
dispatcher clears it when a resolved host stops answering.
"""

import threading
from typing import Literal

import httpx

from caconnector.core.logging import logger
from caconnector.domain.services.token_provider import TokenProvider
from caconnector.exceptions import (
    InvalidArgumentError,
    MalformedResponseError,
    ServiceNotFoundError,
    TransportError,
)
from caconnector.models.directory import ServiceEndpoint
from caconnector.models.envelope import new_correlation_id
from caconnector.services.responses import is_name_resolution_failure, parse_json_response

DEFAULT_INTUNE_APP_ID = "0000000a-0000-0000-c000-000000000000"
DEFAULT_AADGRAPH_RESOURCE_URL = "https://graph.windows.net/"
DEFAULT_MSGRAPH_RESOURCE_URL = "https://graph.microsoft.com/"
DEFAULT_AADGRAPH_VERSION = "1.6"
DEFAULT_MSGRAPH_VERSION = "1.0"


class EndpointResolver:
    """
    Cached, self-healing service name to URL lookup.

    The whole of ``resolve`` runs under a single lock, so concurrent callers
    on one instance never trigger duplicate directory refreshes and never
    observe a half-built map.
    """

    def __init__(
        self,
        tenant: str,
        token_provider: TokenProvider,
        http_client: httpx.Client,
        *,
        app_id: str = DEFAULT_INTUNE_APP_ID,
        directory_api: Literal["aad_graph", "ms_graph"] = "aad_graph",
        graph_resource_url: str = DEFAULT_AADGRAPH_RESOURCE_URL,
        graph_api_version: str = DEFAULT_AADGRAPH_VERSION,
        ms_graph_resource_url: str = DEFAULT_MSGRAPH_RESOURCE_URL,
        ms_graph_api_version: str = DEFAULT_MSGRAPH_VERSION,
    ):
        """
        Initialize the resolver.

        Args:
            tenant: Tenant identifier used in the directory URL
            token_provider: Provider for directory access tokens
            http_client: Client used for the directory GET
            app_id: Application whose service endpoints are listed
            directory_api: "aad_graph" or "ms_graph"
            graph_resource_url: AAD Graph resource URL
            graph_api_version: AAD Graph API version
            ms_graph_resource_url: Microsoft Graph resource URL
            ms_graph_api_version: Microsoft Graph API version
        """
        if not tenant:
            raise InvalidArgumentError("The argument 'tenant' is missing")

        self.tenant = tenant
        self.token_provider = token_provider
        self.http_client = http_client
        self.app_id = app_id
        self.directory_api = directory_api
        self.graph_resource_url = graph_resource_url
        self.graph_api_version = graph_api_version
        self.ms_graph_resource_url = ms_graph_resource_url
        self.ms_graph_api_version = ms_graph_api_version

        self._service_map: dict[str, str] = {}
        self._lock = threading.Lock()

    @property
    def directory_url(self) -> str:
        """URL of the directory's service endpoint list."""
        if self.directory_api == "ms_graph":
            return (
                f"{_with_slash(self.ms_graph_resource_url)}v{self.ms_graph_api_version}"
                f"/servicePrincipals/appId={self.app_id}/endpoints"
            )
        return (
            f"{_with_slash(self.graph_resource_url)}{self.tenant}"
            f"/servicePrincipalsByAppId/{self.app_id}"
            f"/serviceEndpoints?api-version={self.graph_api_version}"
        )

    @property
    def directory_resource(self) -> str:
        """Resource the directory token is requested for."""
        if self.directory_api == "ms_graph":
            return self.ms_graph_resource_url
        return self.graph_resource_url

    def resolve(self, service_name: str) -> str:
        """
        Get the base URL of a service.

        Args:
            service_name: Logical service name (case-insensitive)

        Returns:
            Physical base URL

        Raises:
            InvalidArgumentError: If service_name is empty
            ServiceNotFoundError: If the directory has no such service
            AuthenticationUnavailableError, TransportError, HttpError,
            MalformedResponseError: If the directory refresh fails
        """
        if not service_name or not service_name.strip():
            raise InvalidArgumentError("The argument 'service_name' is missing")

        key = service_name.lower()

        with self._lock:
            if not self._service_map:
                logger.info("Refreshing service map from directory")
                self._service_map = self._fetch_service_map()

            endpoint = self._service_map.get(key)
            if endpoint:
                return endpoint

            logger.info(f"Could not find endpoint for service '{service_name}'")
            logger.info("ServiceMap: ")
            for name, uri in self._service_map.items():
                logger.info(f"{name}:{uri}")

        error = ServiceNotFoundError(service_name)
        logger.error(error.message)
        raise error

    def clear(self) -> None:
        """Drop every cached endpoint so the next resolve refreshes."""
        with self._lock:
            self._service_map = {}

    def cached_services(self) -> dict[str, str]:
        """Snapshot of the cached map (lower-cased name -> URL)."""
        with self._lock:
            return dict(self._service_map)

    def _fetch_service_map(self) -> dict[str, str]:
        # Builds a new map; the caller swaps it in only if this returns.
        token = self.token_provider.get_token(self.directory_resource)
        url = self.directory_url
        correlation_id = new_correlation_id()

        try:
            response = self.http_client.get(
                url,
                headers={
                    "Authorization": f"Bearer {token.access_token}",
                    "client-request-id": correlation_id,
                },
            )
        except httpx.TransportError as e:
            kind = "resolve host for" if is_name_resolution_failure(e) else "contact"
            logger.error(f"Failed to {kind} directory with URL: {url}; {e}")
            raise TransportError(
                f"Failed to {kind} directory with URL: {url}", url, correlation_id
            ) from e

        payload = parse_json_response(response, url, correlation_id)

        entries = payload.get("value")
        if not isinstance(entries, list):
            error = MalformedResponseError(
                f"Failed to parse JSON response during service discovery from {url}",
                correlation_id,
            )
            logger.error(error.message)
            raise error

        service_map: dict[str, str] = {}
        for entry in entries:
            endpoint = ServiceEndpoint.from_directory_entry(entry)
            if endpoint is None:
                logger.warning(f"Skipping malformed directory entry: {entry!r}")
                continue
            service_map[endpoint.service_name.lower()] = endpoint.uri

        logger.info(f"Service map refreshed with {len(service_map)} endpoints")
        return service_map


def _with_slash(url: str) -> str:
    return url if url.endswith("/") else f"{url}/"
