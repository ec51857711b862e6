"""
Connector services.

- EndpointResolver: logical service name -> base URL, cached
- RequestDispatcher: authenticated JSON POST to a named service
- ScepValidationClient / RevocationClient: business operations
"""

from caconnector.services.dispatcher import RequestDispatcher
from caconnector.services.endpoint_resolver import EndpointResolver
from caconnector.services.revocation import RevocationClient
from caconnector.services.scep_validation import ScepValidationClient

__all__ = [
    "EndpointResolver",
    "RequestDispatcher",
    "RevocationClient",
    "ScepValidationClient",
]
