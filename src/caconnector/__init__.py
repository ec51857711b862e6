"""
CA connector client library.

Lets a certificate authority validate SCEP requests against the device
management service, report issuance outcomes and process revocation
requests.
"""

from caconnector.exceptions import (
    AuthenticationUnavailableError,
    BusinessRejectionError,
    ConfigurationError,
    ConnectorError,
    HttpError,
    InvalidArgumentError,
    MalformedResponseError,
    OperationFailedError,
    ServiceNotFoundError,
    TransportError,
)
from caconnector.core.logging import intercept_standard_logging
from caconnector.services.revocation import RevocationClient
from caconnector.services.scep_validation import ScepValidationClient

__version__ = "1.0.0"

__all__ = [
    "AuthenticationUnavailableError",
    "BusinessRejectionError",
    "ConfigurationError",
    "ConnectorError",
    "HttpError",
    "InvalidArgumentError",
    "MalformedResponseError",
    "OperationFailedError",
    "RevocationClient",
    "ScepValidationClient",
    "ServiceNotFoundError",
    "TransportError",
    "__version__",
    "intercept_standard_logging",
]
