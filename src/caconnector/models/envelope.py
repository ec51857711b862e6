"""Outbound request envelope."""

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def new_correlation_id() -> str:
    """Generate a correlation id for one logical operation."""
    return str(uuid.uuid4())


class RequestEnvelope(BaseModel):
    """
    Everything the dispatcher needs to send one business request.

    Built fresh per call; the correlation id identifies the logical
    operation, not an HTTP attempt.
    """

    model_config = ConfigDict(frozen=True)

    service_name: str = Field(..., min_length=1)
    url_suffix: str = Field(..., min_length=1)
    api_version: str = Field(..., min_length=1)
    body: dict[str, Any]
    correlation_id: str = Field(default_factory=new_correlation_id)
    additional_headers: dict[str, str] = Field(default_factory=dict)

    def headers(self, token: str) -> dict[str, str]:
        """
        Build the request headers.

        Args:
            token: Bearer access token

        Returns:
            Header mapping; caller-supplied headers are added last
        """
        headers = {
            "Authorization": f"Bearer {token}",
            "content-type": "application/json",
            "client-request-id": self.correlation_id,
            "api-version": self.api_version,
        }
        headers.update(self.additional_headers)
        return headers
