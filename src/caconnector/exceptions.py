"""
Connector exception hierarchy.

Every failure surfaced by the connector derives from ``ConnectorError``.
Each class carries a ``retryable`` flag telling the caller whether
re-invoking the top-level operation can succeed without a fix on either
side.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from caconnector.models.error_codes import ScepErrorCode


class ConnectorError(Exception):
    """Base class for all connector errors."""

    retryable: bool = False

    def __init__(self, message: str, correlation_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.correlation_id = correlation_id


class ConfigurationError(ConnectorError):
    """A required configuration value is missing or invalid."""


class InvalidArgumentError(ConnectorError, ValueError):
    """An argument passed to a connector operation is invalid."""


class AuthenticationUnavailableError(ConnectorError):
    """The identity backend is unreachable or returned no token."""

    retryable = True


class ServiceNotFoundError(ConnectorError):
    """A logical service name is absent from the directory."""

    retryable = True

    def __init__(self, service_name: str):
        super().__init__(
            f"Service endpoint for '{service_name}' was not found in the directory"
        )
        self.service_name = service_name


class TransportError(ConnectorError):
    """
    The request never produced an HTTP response.

    Raised for DNS, connection and read failures. The endpoint cache is
    cleared as a side effect before this is raised.
    """

    retryable = True

    def __init__(self, message: str, url: str, correlation_id: str | None = None):
        super().__init__(message, correlation_id)
        self.url = url


class MalformedResponseError(ConnectorError):
    """The response body is empty, unreadable or not the expected JSON."""

    def __init__(self, reason: str, correlation_id: str | None = None):
        super().__init__(f"ActivityId: {correlation_id} {reason}", correlation_id)
        self.reason = reason


class HttpError(ConnectorError):
    """
    The service answered with a non-2xx status.

    Attributes:
        status_code: HTTP status code
        reason_phrase: HTTP reason phrase
        body: Decoded JSON body, or None if the body was empty or not JSON
        url: Request URL
    """

    def __init__(
        self,
        status_code: int,
        reason_phrase: str,
        body: Any,
        url: str,
        correlation_id: str | None = None,
    ):
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.body = body
        self.url = url
        super().__init__(
            f"Request to: {url} returned: {self.status_line} "
            f"(ActivityId: {correlation_id})",
            correlation_id,
        )

    @property
    def status_line(self) -> str:
        """Status line in ``HTTP/1.1 <code> <reason>`` form."""
        return f"HTTP/1.1 {self.status_code} {self.reason_phrase}".rstrip()

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code in (408, 429) or self.status_code >= 500


class BusinessRejectionError(ConnectorError):
    """
    The validation service rejected the request.

    IMPORTANT: when this is raised the SCEP server must not issue a
    certificate to the client.
    """

    def __init__(
        self,
        error_code: "ScepErrorCode",
        original_error_code: str | None,
        error_description: str | None,
        transaction_id: str,
        correlation_id: str,
    ):
        super().__init__(
            f"ActivityId:{correlation_id},"
            f"TransactionId:{transaction_id},"
            f"ErrorCode:{original_error_code},"
            f"ErrorDescription:{error_description}",
            correlation_id,
        )
        self.error_code = error_code
        self.original_error_code = original_error_code
        self.error_description = error_description
        self.transaction_id = transaction_id


class OperationFailedError(ConnectorError):
    """The service acknowledged an upload-style operation with ``false``."""

    def __init__(
        self,
        message: str,
        transaction_id: str | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message, correlation_id)
        self.transaction_id = transaction_id
