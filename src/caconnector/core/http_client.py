"""
httpx client builder.

Every outbound call (directory lookup, business POST, legacy token grant)
goes through a client built here so timeouts and proxy policy are uniform.
"""

import httpx

from caconnector.config import Settings
from caconnector.core.logging import logger


def build_http_client(
    settings: Settings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """
    Create a synchronous ``httpx.Client`` configured from settings.

    Args:
        settings: Connector settings (timeout and proxy are read from here)
        transport: Optional transport override, used by tests

    Returns:
        Configured client. The caller owns it and must close it.
    """
    proxy = settings.proxy_url()
    if proxy:
        logger.info(
            f"Using HTTP proxy {settings.proxy_host}:{settings.proxy_port}"
            + (" with basic authentication" if settings.proxy_user else "")
        )

    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        proxy=proxy if transport is None else None,
        transport=transport,
        follow_redirects=False,
    )
