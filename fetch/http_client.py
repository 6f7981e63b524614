import httpx
import logging
from typing import Optional, Dict

# Default timeout configuration (in seconds)
DEFAULT_TIMEOUT = 20.0
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0 Safari/537.36"
)


async def fetch_url(
    url: str,
    timeout: Optional[float] = None,
    connect_timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.Response:
    """
    GET a page, following redirects.

    Args:
        url: The URL to fetch
        timeout: Total request timeout in seconds (default: 20s)
        connect_timeout: Connection timeout in seconds (default: 5s)
        headers: Extra request headers; a browser-like User-Agent is sent unless overridden
        transport: Optional httpx transport (tests pass an httpx.MockTransport)

    Returns:
        httpx.Response object
    """
    logger = logging.getLogger(__name__)
    logger.debug(f"HTTP GET {url} (timeout: {timeout or DEFAULT_TIMEOUT}s)")

    timeout_config = httpx.Timeout(
        timeout=timeout or DEFAULT_TIMEOUT,
        connect=connect_timeout or DEFAULT_CONNECT_TIMEOUT
    )
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    request_headers.update(headers or {})

    try:
        async with httpx.AsyncClient(timeout=timeout_config, follow_redirects=True, transport=transport) as client:
            response = await client.get(url, headers=request_headers)
            logger.debug(f"HTTP {response.status_code} {response.url} ({len(response.text)} bytes)")
            # Error pages still carry fingerprints; let the engine look at them
            return response
    except httpx.TimeoutException as e:
        logger.warning(f"HTTP timeout for {url}: {e}")
        raise
    except httpx.RequestError as e:
        logger.warning(f"HTTP request error for {url}: {e}")
        raise
