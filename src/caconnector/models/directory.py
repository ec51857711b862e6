"""Directory (service discovery) models."""

from typing import Any

from pydantic import BaseModel, Field


class ServiceEndpoint(BaseModel):
    """One entry of the directory's service endpoint list."""

    service_name: str = Field(..., min_length=1, description="Logical service name")
    uri: str = Field(..., min_length=1, description="Physical base URL")

    @classmethod
    def from_directory_entry(cls, entry: Any) -> "ServiceEndpoint | None":
        """
        Build an endpoint from a raw directory entry.

        The AAD Graph directory names the service ``serviceName``; the
        Microsoft Graph directory uses ``providerName``.

        Args:
            entry: One element of the response ``value`` array

        Returns:
            ServiceEndpoint, or None if the entry lacks a name or uri
        """
        if not isinstance(entry, dict):
            return None
        name = entry.get("providerName") or entry.get("serviceName")
        uri = entry.get("uri")
        if not isinstance(name, str) or not isinstance(uri, str) or not name or not uri:
            return None
        return cls(service_name=name, uri=uri)
