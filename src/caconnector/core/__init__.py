"""Cross-cutting concerns: logging, correlation context, HTTP client."""
