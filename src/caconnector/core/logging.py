"""
Loguru configuration for the connector.

This module configures loguru with:
- Automatic correlation id in each log
- Configurable format from settings
- Redirection of standard library logs (httpx, msal) to loguru; call
  intercept_standard_logging() once at application startup
"""

import logging
import sys
from typing import Any

from loguru import logger

from caconnector.config import settings
from caconnector.core.trace_context import (
    correlation_id_context,
    transaction_id_context,
)


def add_correlation_id(record: dict[str, Any]) -> bool:
    """
    Adds the correlation_id and transaction_id to the log record.

    The correlation_id is bound by the dispatcher for the duration of an
    outbound call, so every line logged during that call can be matched
    with the server-side trace. The transaction_id is bound by the SCEP
    client for the certificate request being processed.

    Args:
        record: Loguru record

    Returns:
        True to indicate that the filter passed
    """
    correlation_id = correlation_id_context.get()
    transaction_id = transaction_id_context.get()
    record["extra"].setdefault(
        "correlation_id", correlation_id if correlation_id else "N/A"
    )
    record["extra"].setdefault(
        "transaction_id", transaction_id if transaction_id else "N/A"
    )
    return True


def configure_logger() -> None:
    """
    Configures loguru with connector settings.

    This function:
    1. Removes default loguru handlers
    2. Adds handler to stderr with custom configuration
    """
    logger.remove()

    logger.add(
        sink=sys.stderr,
        level=settings.log_level.upper(),
        format=settings.log_format,
        filter=add_correlation_id,
        colorize=not settings.log_serialize,
        serialize=settings.log_serialize,
        backtrace=True,
        diagnose=False,
        enqueue=settings.logger_enqueue,
    )


# Configure logger when importing the module
configure_logger()


__all__ = ["logger", "InterceptHandler", "intercept_standard_logging"]


class InterceptHandler(logging.Handler):
    """
    Handler to redirect standard logging logs to loguru.

    httpx and msal log through the standard library; this handler sends
    their records through the same sink and format as the connector.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """
        Redirects a standard logging record to loguru.

        Args:
            record: logging.LogRecord record
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def intercept_standard_logging(level: int = logging.WARNING) -> None:
    """
    Configures redirection of standard logging to loguru.

    Intercepts logs from:
    - httpx / httpcore (HTTP client)
    - msal (modern identity backend)

    Args:
        level: Minimum stdlib level forwarded for these loggers
    """
    for logger_name in ["httpx", "httpcore", "msal"]:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.setLevel(level)
        logging_logger.propagate = False
