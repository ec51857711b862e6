"""
Domain layer - contracts the connector is built on.

This package contains:
- Services: Abstract interfaces implemented by the infrastructure layer
"""
