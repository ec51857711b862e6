"""
Authenticated JSON request dispatcher.

Sends POST requests to management services addressed by logical name:
resolve endpoint, acquire token, send, parse. No step is retried here;
a caller that retries after a TransportError gets a fresh directory
lookup because the endpoint cache was cleared.
"""

from collections.abc import Mapping
from typing import Any

import httpx

from caconnector.core.logging import logger
from caconnector.core.trace_context import correlation_id_context
from caconnector.domain.services.token_provider import TokenProvider
from caconnector.exceptions import InvalidArgumentError, TransportError
from caconnector.models.envelope import RequestEnvelope, new_correlation_id
from caconnector.services.endpoint_resolver import EndpointResolver
from caconnector.services.responses import is_name_resolution_failure, parse_json_response

DEFAULT_INTUNE_RESOURCE_URL = "https://api.manage.microsoft.com/"


class RequestDispatcher:
    """Client which can be used to make requests to management services."""

    def __init__(
        self,
        endpoint_resolver: EndpointResolver,
        token_provider: TokenProvider,
        http_client: httpx.Client,
        resource_url: str = DEFAULT_INTUNE_RESOURCE_URL,
    ):
        """
        Initialize the dispatcher.

        Args:
            endpoint_resolver: Resolver for service base URLs
            token_provider: Provider for business-service tokens
            http_client: Client used for business requests
            resource_url: Resource tokens are requested for
        """
        self.endpoint_resolver = endpoint_resolver
        self.token_provider = token_provider
        self.http_client = http_client
        self.resource_url = resource_url

    def post(
        self,
        service_name: str,
        url_suffix: str,
        api_version: str,
        body: Mapping[str, Any],
        correlation_id: str | None = None,
        additional_headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Post a request to a management service.

        Args:
            service_name: Logical name of the service to post to
            url_suffix: Path appended to the service base URL
            api_version: API version of the service
            body: JSON body of the request
            correlation_id: Id of this activity; generated when omitted
            additional_headers: Extra headers (e.g. UserAgent)

        Returns:
            JSON object returned by the service

        Raises:
            InvalidArgumentError: If an argument is missing
            ServiceNotFoundError: If the service is not in the directory
            AuthenticationUnavailableError: If no token could be acquired
            TransportError: If the service could not be reached
            HttpError: If the service answered with a non-2xx status
            MalformedResponseError: If the response is not a JSON object
        """
        for name, value in (
            ("service_name", service_name),
            ("url_suffix", url_suffix),
            ("api_version", api_version),
        ):
            if not value or not str(value).strip():
                raise InvalidArgumentError(f"The argument '{name}' is missing")
        if not isinstance(body, Mapping):
            raise InvalidArgumentError("The argument 'body' is missing")

        envelope = RequestEnvelope(
            service_name=service_name,
            url_suffix=url_suffix,
            api_version=api_version,
            body=dict(body),
            correlation_id=correlation_id or new_correlation_id(),
            additional_headers=dict(additional_headers or {}),
        )
        return self.send(envelope)

    def send(self, envelope: RequestEnvelope) -> dict[str, Any]:
        """
        Send a prepared envelope.

        See ``post`` for the raised errors.
        """
        context_token = correlation_id_context.set(envelope.correlation_id)
        try:
            base_url = self.endpoint_resolver.resolve(envelope.service_name)
            token = self.token_provider.get_token(self.resource_url)

            url = f"{base_url.rstrip('/')}/{envelope.url_suffix.lstrip('/')}"
            try:
                response = self.http_client.post(
                    url,
                    json=envelope.body,
                    headers=envelope.headers(token.access_token),
                )
            except httpx.TransportError as e:
                # The endpoint may have moved; force a directory refresh next time
                self.endpoint_resolver.clear()
                kind = "resolve host for" if is_name_resolution_failure(e) else "contact"
                logger.error(f"Failed to {kind} service with URL: {url}; {e}")
                raise TransportError(
                    f"Failed to {kind} service with URL: {url}",
                    url,
                    envelope.correlation_id,
                ) from e

            result = parse_json_response(response, url, envelope.correlation_id)
            logger.info(f"Activity {envelope.correlation_id} has completed.")
            return result
        finally:
            correlation_id_context.reset(context_token)
