"""
Shared httpx client factory for the outbound scraping and API calls
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

import config


def build_client(timeout: float = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout or config.REQUEST_TIMEOUT,
        follow_redirects=True,
        headers={'User-Agent': config.HEADERS['User-Agent']},
    )


@asynccontextmanager
async def open_client(client: Optional[httpx.AsyncClient] = None,
                      timeout: float = None) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client as-is, or a fresh one that is closed on exit."""
    if client is not None:
        yield client
        return

    async with build_client(timeout) as fresh:
        yield fresh
