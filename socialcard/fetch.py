"""Download background and font assets over HTTP.

The three downloads of a render have no dependency on each other, so
``fetch_assets`` runs them concurrently on one client and returns once all
of them have completed.
"""

from __future__ import annotations

import asyncio
import os
from typing import Sequence, Tuple

import httpx

from .errors import AssetFetchError

FETCH_TIMEOUT: float = float(os.getenv("FETCH_TIMEOUT", "25"))


def make_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(follow_redirects=True, timeout=FETCH_TIMEOUT)


async def fetch_bytes(client: httpx.AsyncClient, url: str) -> bytes:
    """GET ``url`` and return the body.

    Raises:
        AssetFetchError: On a non-2xx status or a transport failure.
    """
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        raise AssetFetchError(url, reason=str(exc) or type(exc).__name__) from exc
    if not response.is_success:
        raise AssetFetchError(url, response.status_code)
    return response.content


async def fetch_assets(background_url: str, font_urls: Sequence[str]) -> Tuple[bytes, list]:
    """Fetch the background and every font concurrently.

    Returns:
        ``(background_bytes, [font_bytes, ...])`` with fonts in the order of
        ``font_urls``.
    """
    async with make_client() as client:
        results = await asyncio.gather(
            fetch_bytes(client, background_url),
            *(fetch_bytes(client, url) for url in font_urls),
        )
    return results[0], list(results[1:])
