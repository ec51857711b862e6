"""
Abstract interface for identity backends.

This module defines the contract that every token provider must follow.
Callers hold a ``TokenProvider`` and never know which backend is behind it.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from caconnector.exceptions import InvalidArgumentError
from caconnector.models.auth import Token

DEFAULT_SCOPE_SUFFIX = "/.default"


class TokenProvider(ABC):
    """
    Acquires bearer tokens for a resource or a set of scopes.

    Implementations authenticate synchronously on the calling thread and
    perform no caching of their own beyond what the backend library does.
    """

    @abstractmethod
    def get_token(self, resource_or_scopes: str | Sequence[str]) -> Token:
        """
        Acquire an access token.

        Args:
            resource_or_scopes: Resource URL (e.g. ``https://graph.windows.net/``)
                or a sequence of scopes (e.g. ``["https://graph.windows.net/.default"]``)

        Returns:
            Token for the requested resource

        Raises:
            InvalidArgumentError: If the argument is empty
            AuthenticationUnavailableError: If the backend is unreachable or
                returned no token
        """
        pass

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Backend identifier (modern, legacy)."""
        pass


def to_scopes(resource_or_scopes: str | Sequence[str]) -> list[str]:
    """
    Normalize a resource or scope list into a scope list.

    A bare resource URL becomes ``<resource>/.default``.

    Raises:
        InvalidArgumentError: If nothing usable was supplied
    """
    if isinstance(resource_or_scopes, str):
        resource = resource_or_scopes.strip()
        if not resource:
            raise InvalidArgumentError("The argument 'resource' is missing")
        if resource.endswith(DEFAULT_SCOPE_SUFFIX):
            return [resource]
        return [resource.rstrip("/") + DEFAULT_SCOPE_SUFFIX]

    scopes = [s.strip() for s in resource_or_scopes if s and s.strip()]
    if not scopes:
        raise InvalidArgumentError("The argument 'scopes' is missing")
    return scopes


def to_resource(resource_or_scopes: str | Sequence[str]) -> str:
    """
    Normalize a resource or scope list into a single resource URL.

    ``https://x/.default`` becomes ``https://x/``.

    Raises:
        InvalidArgumentError: If nothing usable was supplied, or several
            scopes name different resources
    """
    if isinstance(resource_or_scopes, str):
        candidates = [resource_or_scopes.strip()]
    else:
        candidates = [s.strip() for s in resource_or_scopes if s and s.strip()]

    candidates = [c for c in candidates if c]
    if not candidates:
        raise InvalidArgumentError("The argument 'resource' is missing")

    resources = set()
    for candidate in candidates:
        if candidate.endswith(DEFAULT_SCOPE_SUFFIX):
            candidate = candidate[: -len(DEFAULT_SCOPE_SUFFIX)].rstrip("/") + "/"
        resources.add(candidate)

    if len(resources) > 1:
        raise InvalidArgumentError(
            f"Legacy authority accepts a single resource, got: {sorted(resources)}"
        )
    return resources.pop()
