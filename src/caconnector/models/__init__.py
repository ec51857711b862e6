"""Data models exchanged with the identity, directory and management services."""

from caconnector.models.auth import Credential, Token
from caconnector.models.directory import ServiceEndpoint
from caconnector.models.envelope import RequestEnvelope, new_correlation_id
from caconnector.models.error_codes import CARequestErrorCode, ScepErrorCode
from caconnector.models.revocation import RevocationRequest, RevocationResult

__all__ = [
    "CARequestErrorCode",
    "Credential",
    "RequestEnvelope",
    "RevocationRequest",
    "RevocationResult",
    "ScepErrorCode",
    "ServiceEndpoint",
    "Token",
    "new_correlation_id",
]
