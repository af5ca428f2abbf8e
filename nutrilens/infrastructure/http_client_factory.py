"""HTTP client factory for connection pooling."""
import httpx
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Shared client for the main event loop
_shared_client: Optional[httpx.AsyncClient] = None


def create_http_client(timeout: float = 120.0) -> httpx.AsyncClient:
    """
    Build a new pooled async HTTP client.

    Worker threads call this on their own event loop: an AsyncClient's
    connections belong to the loop that opened them, so a worker never
    borrows the shared client.
    """
    return httpx.AsyncClient(
        timeout=timeout,
        limits=httpx.Limits(
            max_keepalive_connections=20,
            max_connections=100,
            keepalive_expiry=30.0,
        ),
        http2=True,
    )


def get_shared_http_client() -> httpx.AsyncClient:
    """
    Get or create the shared async HTTP client used on the main event loop.

    Returns:
        Shared AsyncClient instance
    """
    global _shared_client

    if _shared_client is None:
        _shared_client = create_http_client()
        logger.info("Created shared HTTP client for connection pooling")

    return _shared_client


async def close_shared_http_client() -> None:
    """
    Close shared HTTP client (call on application shutdown).
    """
    global _shared_client

    if _shared_client is not None:
        await _shared_client.aclose()
        _shared_client = None
        logger.info("Closed shared HTTP client")
