"""Revocation work item models exchanged with the PKI connector service."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from caconnector.exceptions import InvalidArgumentError
from caconnector.models.error_codes import CARequestErrorCode


class RevocationRequest(BaseModel):
    """
    A certificate the CA has been asked to revoke.

    Attributes:
        request_context: Opaque context to echo back in the result
        serial_number: Serial number of the certificate to revoke
        issuer_name: Issuer name of the certificate (optional)
        ca_configuration: CA configuration string (optional)
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_context: str = Field(..., alias="requestContext")
    serial_number: str = Field(..., alias="serialNumber")
    issuer_name: str | None = Field(None, alias="issuerName")
    ca_configuration: str | None = Field(None, alias="caConfiguration")


class RevocationResult(BaseModel):
    """
    Outcome of processing one revocation request on the CA.

    Attributes:
        request_context: Context copied from the RevocationRequest
        succeeded: Whether the CA revoked the certificate
        error_code: Error code; must be NONE when succeeded
        error_message: Failure description (optional)
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    request_context: str = Field(..., alias="requestContext")
    succeeded: bool = Field(..., alias="succeeded")
    error_code: CARequestErrorCode = Field(
        CARequestErrorCode.NONE, alias="errorCode"
    )
    error_message: str | None = Field(None, alias="errorMessage")

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            reasons = "; ".join(
                err["msg"].removeprefix("Value error, ") for err in e.errors()
            )
            raise InvalidArgumentError(reasons) from e

    @model_validator(mode="after")
    def _check_outcome(self) -> Self:
        if not self.request_context or not self.request_context.strip():
            raise ValueError("The argument 'request_context' is missing")
        if self.succeeded and self.error_code != CARequestErrorCode.NONE:
            raise ValueError(
                "The argument 'error_code' must be NONE if succeeded is True"
            )
        if self.succeeded and self.error_message is not None:
            raise ValueError(
                "The argument 'error_message' is not allowed if succeeded is True"
            )
        if not self.succeeded and self.error_code == CARequestErrorCode.NONE:
            raise ValueError(
                "The argument 'error_code' may not be NONE if succeeded is False"
            )
        return self

    @classmethod
    def create(
        cls,
        request_context: str,
        succeeded: bool,
        error_code: CARequestErrorCode = CARequestErrorCode.NONE,
        error_message: str | None = None,
    ) -> "RevocationResult":
        """
        Build a result from positional values.

        Raises:
            InvalidArgumentError: If the context is empty, a success carries
                an error code or message, or a failure has no error code.
        """
        return cls(
            request_context=request_context,
            succeeded=succeeded,
            error_code=error_code,
            error_message=error_message,
        )

    @classmethod
    def from_request(
        cls,
        request: RevocationRequest,
        succeeded: bool,
        error_code: CARequestErrorCode = CARequestErrorCode.NONE,
        error_message: str | None = None,
    ) -> "RevocationResult":
        """Build the result for a downloaded request."""
        return cls.create(request.request_context, succeeded, error_code, error_message)

    def to_wire(self) -> dict:
        """Serialize with the service's camelCase field names."""
        return self.model_dump(by_alias=True, mode="json")
