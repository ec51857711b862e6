"""
Client for the SCEP request validation service.

IMPORTANT: if any method of ScepValidationClient raises, the SCEP server
must not issue a certificate to the client.
"""

from datetime import UTC, datetime
from typing import Any

import httpx

from caconnector.config import Settings
from caconnector.core.logging import logger
from caconnector.core.trace_context import transaction_id_context
from caconnector.exceptions import BusinessRejectionError, InvalidArgumentError
from caconnector.models.envelope import new_correlation_id
from caconnector.models.error_codes import ScepErrorCode
from caconnector.services.base_client import ServiceClient

MAX_ERROR_DESCRIPTION_LENGTH = 255


class ScepValidationClient(ServiceClient):
    """Validates certificate requests and reports issuance outcomes."""

    SERVICE_NAME = "ScepRequestValidationFEService"
    DEFAULT_SERVICE_VERSION = "2018-02-20"
    VALIDATION_URL = "ScepActions/validateRequest"
    NOTIFY_SUCCESS_URL = "ScepActions/successNotification"
    NOTIFY_FAILURE_URL = "ScepActions/failureNotification"

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.Client | None = None,
    ) -> "ScepValidationClient":
        """
        Build a client from settings.

        Args:
            settings: Connector settings
            http_client: Optional client; one is created (and owned) otherwise

        Raises:
            ConfigurationError: If the settings are incomplete
        """
        return cls._from_settings(
            settings, http_client, settings.scep_service_version
        )

    def validate_request(self, transaction_id: str, certificate_request: str) -> None:
        """
        Validates whether the given certificate request is valid.

        Args:
            transaction_id: Transaction id of the certificate request
            certificate_request: Base64 encoded PKCS#10 request

        Raises:
            BusinessRejectionError: If the service rejected the request
        """
        _require(transaction_id=transaction_id, certificate_request=certificate_request)

        body = {
            "request": {
                "transactionId": transaction_id,
                "certificateRequest": certificate_request,
                "callerInfo": self.provider_name_and_version,
            }
        }
        self._post(body, self.VALIDATION_URL, transaction_id)

    def send_success_notification(
        self,
        transaction_id: str,
        certificate_request: str,
        certificate_thumbprint: str,
        certificate_serial_number: str,
        certificate_expiration_date: str | datetime,
        issuing_certificate_authority: str,
    ) -> None:
        """
        Send a success notification to the SCEP service.

        Args:
            transaction_id: Transaction id of the certificate request
            certificate_request: Base64 encoded PKCS#10 request
            certificate_thumbprint: Thumbprint of the issued certificate
            certificate_serial_number: Serial number of the issued certificate
            certificate_expiration_date: Expiry as an ISO 8601 UTC string
                (YYYY-MM-DDThh:mm:ss.sssZ) or a datetime
            issuing_certificate_authority: Authority that issued the certificate

        Raises:
            BusinessRejectionError: If the service rejected the notification
        """
        if isinstance(certificate_expiration_date, datetime):
            certificate_expiration_date = _format_utc(certificate_expiration_date)

        _require(
            transaction_id=transaction_id,
            certificate_request=certificate_request,
            certificate_thumbprint=certificate_thumbprint,
            certificate_serial_number=certificate_serial_number,
            certificate_expiration_date=certificate_expiration_date,
            issuing_certificate_authority=issuing_certificate_authority,
        )

        body = {
            "notification": {
                "transactionId": transaction_id,
                "certificateRequest": certificate_request,
                "certificateThumbprint": certificate_thumbprint,
                "certificateSerialNumber": certificate_serial_number,
                "certificateExpirationDateUtc": certificate_expiration_date,
                "issuingCertificateAuthority": issuing_certificate_authority,
                "callerInfo": self.provider_name_and_version,
            }
        }
        self._post(body, self.NOTIFY_SUCCESS_URL, transaction_id)

    def send_failure_notification(
        self,
        transaction_id: str,
        certificate_request: str,
        h_result: int,
        error_description: str,
    ) -> None:
        """
        Send a failure notification to the SCEP service.

        Args:
            transaction_id: Transaction id of the certificate request
            certificate_request: Base64 encoded PKCS#10 request
            h_result: 32-bit HRESULT error code shown to the administrator
            error_description: What went wrong (truncated to 255 characters)

        Raises:
            BusinessRejectionError: If the service rejected the notification
        """
        _require(
            transaction_id=transaction_id,
            certificate_request=certificate_request,
            error_description=error_description,
        )
        if isinstance(h_result, bool) or not isinstance(h_result, int):
            raise InvalidArgumentError("The argument 'h_result' must be an integer")

        body = {
            "notification": {
                "transactionId": transaction_id,
                "certificateRequest": certificate_request,
                "hResult": h_result,
                "errorDescription": error_description[:MAX_ERROR_DESCRIPTION_LENGTH],
                "callerInfo": self.provider_name_and_version,
            }
        }
        self._post(body, self.NOTIFY_FAILURE_URL, transaction_id)

    def _post(self, body: dict[str, Any], url_suffix: str, transaction_id: str) -> None:
        correlation_id = new_correlation_id()
        context_token = transaction_id_context.set(transaction_id)
        try:
            result = self.dispatcher.post(
                self.SERVICE_NAME,
                url_suffix,
                self.service_version,
                body,
                correlation_id=correlation_id,
                additional_headers=self.additional_headers,
            )
            logger.debug(f"Activity {correlation_id} result: {result}")

            raw_code = _first_present(result, "code", "returnCode")
            error_code = ScepErrorCode.parse(raw_code)
            if error_code != ScepErrorCode.SUCCESS:
                error = BusinessRejectionError(
                    error_code=error_code,
                    original_error_code=raw_code if isinstance(raw_code, str) else None,
                    error_description=_first_present(
                        result, "errorDescription", "returnMessage"
                    ),
                    transaction_id=transaction_id,
                    correlation_id=correlation_id,
                )
                logger.warning(error.message)
                raise error
        finally:
            transaction_id_context.reset(context_token)


def _first_present(result: dict, *keys: str):
    for key in keys:
        if result.get(key) is not None:
            return result[key]
    return None


def _require(**arguments: str) -> None:
    for name, value in arguments.items():
        if not isinstance(value, str) or not value.strip():
            raise InvalidArgumentError(f"The argument '{name}' is missing")


def _format_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
