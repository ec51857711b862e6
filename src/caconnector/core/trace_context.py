"""Correlation id context variable for logging"""

import contextvars

# Create a context variable to store the correlation id of the current activity
correlation_id_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# Caller-supplied transaction id of the certificate request being processed
transaction_id_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "transaction_id", default=None
)
