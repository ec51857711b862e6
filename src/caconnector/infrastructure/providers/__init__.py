"""Identity backend implementations."""

from caconnector.infrastructure.providers.legacy_authority import (
    LegacyAuthorityTokenProvider,
)
from caconnector.infrastructure.providers.modern_authority import (
    ModernAuthorityTokenProvider,
)

__all__ = ["LegacyAuthorityTokenProvider", "ModernAuthorityTokenProvider"]
