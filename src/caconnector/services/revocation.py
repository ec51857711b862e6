"""Client for the PKI connector revocation service."""

from collections.abc import Sequence

import httpx
from pydantic import ValidationError

from caconnector.config import Settings
from caconnector.core.logging import logger
from caconnector.core.trace_context import transaction_id_context
from caconnector.exceptions import (
    InvalidArgumentError,
    MalformedResponseError,
    OperationFailedError,
)
from caconnector.models.envelope import new_correlation_id
from caconnector.models.revocation import RevocationRequest, RevocationResult
from caconnector.services.base_client import ServiceClient


class RevocationClient(ServiceClient):
    """Downloads pending revocation requests and uploads their outcomes."""

    SERVICE_NAME = "PkiConnectorFEService"
    DEFAULT_SERVICE_VERSION = "5019-05-05"
    DOWNLOAD_URL = "CertificateAuthorityRequests/downloadRevocationRequests"
    UPLOAD_URL = "CertificateAuthorityRequests/uploadRevocationResults"
    MAX_REQUESTS = 500

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.Client | None = None,
    ) -> "RevocationClient":
        """Build a client from settings (see ScepValidationClient.from_settings)."""
        return cls._from_settings(
            settings, http_client, settings.revocation_service_version
        )

    def download_revocation_requests(
        self,
        transaction_id: str,
        max_requests: int,
        issuer_name: str | None = None,
    ) -> list[RevocationRequest]:
        """
        Download pending revocation requests.

        Args:
            transaction_id: Id used to trace this download
            max_requests: Number of requests to fetch (1-500)
            issuer_name: Only fetch requests for this issuer

        Returns:
            The pending revocation requests, possibly empty

        Raises:
            InvalidArgumentError: If an argument is invalid
            MalformedResponseError: If the response does not hold a list of requests
        """
        if not transaction_id or not transaction_id.strip():
            raise InvalidArgumentError("The argument 'transaction_id' is missing")
        if (
            isinstance(max_requests, bool)
            or not isinstance(max_requests, int)
            or not 1 <= max_requests <= self.MAX_REQUESTS
        ):
            raise InvalidArgumentError(
                f"The argument 'max_requests' must be between 1 and {self.MAX_REQUESTS}"
            )

        body = {
            "downloadParameters": {
                "maxRequests": max_requests,
                "issuerName": issuer_name,
            }
        }

        correlation_id = new_correlation_id()
        context_token = transaction_id_context.set(transaction_id)
        try:
            result = self.dispatcher.post(
                self.SERVICE_NAME,
                self.DOWNLOAD_URL,
                self.service_version,
                body,
                correlation_id=correlation_id,
                additional_headers=self.additional_headers,
            )

            items = result.get("value")
            if not isinstance(items, list):
                error = MalformedResponseError(
                    "Response does not contain a list of revocation requests",
                    correlation_id,
                )
                logger.error(error.message)
                raise error

            try:
                requests = [RevocationRequest.model_validate(item) for item in items]
            except ValidationError as e:
                error = MalformedResponseError(
                    f"Invalid revocation request in response: {e}", correlation_id
                )
                logger.error(error.message)
                raise error from e

            logger.info(f"Downloaded {len(requests)} revocation request(s)")
            return requests
        finally:
            transaction_id_context.reset(context_token)

    def upload_revocation_results(
        self,
        transaction_id: str,
        results: Sequence[RevocationResult],
    ) -> None:
        """
        Upload the outcome of processed revocation requests.

        Args:
            transaction_id: Id used to trace this upload
            results: One result per processed request

        Raises:
            InvalidArgumentError: If an argument is invalid
            OperationFailedError: If the service did not accept the results
        """
        if not transaction_id or not transaction_id.strip():
            raise InvalidArgumentError("The argument 'transaction_id' is missing")
        if not results:
            raise InvalidArgumentError("The argument 'results' is missing")
        if not all(isinstance(r, RevocationResult) for r in results):
            raise InvalidArgumentError(
                "The argument 'results' must only contain RevocationResult items"
            )

        body = {"results": [r.to_wire() for r in results]}

        correlation_id = new_correlation_id()
        context_token = transaction_id_context.set(transaction_id)
        try:
            result = self.dispatcher.post(
                self.SERVICE_NAME,
                self.UPLOAD_URL,
                self.service_version,
                body,
                correlation_id=correlation_id,
                additional_headers=self.additional_headers,
            )

            if result.get("value") is not True:
                error = OperationFailedError(
                    f"Failed to upload revocation results (ActivityId: {correlation_id})",
                    transaction_id=transaction_id,
                    correlation_id=correlation_id,
                )
                logger.error(error.message)
                raise error

            logger.info(f"Uploaded {len(results)} revocation result(s)")
        finally:
            transaction_id_context.reset(context_token)
