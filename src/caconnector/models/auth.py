"""Credential and token models for the identity backends."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Credential(BaseModel):
    """
    Client credential used to authenticate against the identity authority.

    Attributes:
        client_id: Application (client) ID
        client_secret: Application secret
        tenant: Tenant identifier
        authority_url: Authority base URL; the tenant is appended to it
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(..., min_length=1, description="Application (client) ID")
    client_secret: SecretStr = Field(..., description="Application secret")
    tenant: str = Field(..., min_length=1, description="Tenant identifier")
    authority_url: str = Field(
        default="https://login.microsoftonline.com/",
        description="Identity authority base URL",
    )

    @property
    def authority(self) -> str:
        """Tenant-qualified authority URL."""
        return f"{self.authority_url.rstrip('/')}/{self.tenant}"


class Token(BaseModel):
    """Bearer token returned by an identity backend."""

    access_token: str = Field(..., min_length=1, description="Access token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_on: datetime | None = Field(
        default=None, description="Expiration time (UTC), if reported"
    )

    @property
    def is_expired(self) -> bool:
        """True when the backend reported an expiry that has passed."""
        if self.expires_on is None:
            return False
        return self.expires_on <= datetime.now(UTC)

    @property
    def authorization_header(self) -> str:
        """Value for the ``Authorization`` header."""
        return f"Bearer {self.access_token}"
