"""Default HTTP download/exists behaviors.

Used by providers that do not override ``download`` or ``exists``. The URL
returned by ``upload`` is treated as a directly fetchable network address:

- download: GET, fail with DownloadFailedError on a non-2xx response
- exists: HEAD, True only on 2xx; every failure maps to False
"""

from __future__ import annotations

import logging

import httpx

from cdnrouter.config import DEFAULT_HTTP_TIMEOUT_SECONDS
from cdnrouter.errors import DownloadFailedError

logger = logging.getLogger(__name__)


async def http_download(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    follow_redirects: bool = True,
) -> bytes:
    """Fetch the full body at ``url``.

    Args:
        url: Network address of the object.
        client: Optional shared client. Created and closed per call if None.
        timeout_seconds: Timeout for a client created by this call.
        follow_redirects: Whether redirects are followed.

    Returns:
        Response body as bytes.

    Raises:
        DownloadFailedError: If the response status is not 2xx.
        httpx.HTTPError: On transport failure.
    """
    should_close = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout_seconds)
        should_close = True
    try:
        response = await client.get(url, follow_redirects=follow_redirects)
        if not response.is_success:
            logger.warning("Download of %s failed: %s", url, response.status_code)
            raise DownloadFailedError(
                response.reason_phrase,
                url=url,
                status_code=response.status_code,
            )
        return response.content
    finally:
        if should_close:
            await client.aclose()


async def http_exists(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    follow_redirects: bool = True,
) -> bool:
    """Probe ``url`` with HEAD. Never raises.

    Args:
        url: Network address of the object.
        client: Optional shared client. Created and closed per call if None.
        timeout_seconds: Timeout for a client created by this call.
        follow_redirects: Whether redirects are followed.

    Returns:
        True if the response is 2xx, False for any other status or failure.
    """
    should_close = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout_seconds)
        should_close = True
    try:
        response = await client.head(url, follow_redirects=follow_redirects)
        return response.is_success
    except Exception as exc:
        logger.debug("Existence probe for %s failed: %s", url, type(exc).__name__)
        return False
    finally:
        if should_close:
            await client.aclose()
