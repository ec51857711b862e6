"""
Infrastructure layer - concrete identity backends.

Supports two backends via factory pattern:
- modern: MSAL confidential client (scope-based tokens)
- legacy: v1 client-credentials grant (resource-based tokens)
"""

from caconnector.infrastructure.factory import TokenProviderFactory

__all__ = ["TokenProviderFactory"]
