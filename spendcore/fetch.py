from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import httpx

from spendcore.errors import NetworkError

logger = logging.getLogger(__name__)

CACHE_BUST_PARAM = "t"


def cache_busted_url(url: str, now: datetime) -> httpx.URL:
    """Append ``t=<epoch ms>`` to ``url``, keeping its existing query string."""
    stamp = str(int(now.timestamp() * 1000))
    return httpx.URL(url).copy_merge_params({CACHE_BUST_PARAM: stamp})


def fetch_csv(
    url: str,
    *,
    client: Optional[httpx.Client] = None,
    now: Optional[datetime] = None,
    timeout: Optional[float] = None,
) -> str:
    """Issue a single GET for the published CSV and return its text.

    Non-2xx responses and transport failures raise ``NetworkError``. There is
    no retry.
    """
    target = cache_busted_url(url, now or datetime.now())
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = http.get(target)
    except httpx.HTTPError as exc:
        raise NetworkError(f"Transport error: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    logger.debug("GET %s -> %s", url, response.status_code)
    if not response.is_success:
        raise NetworkError(f"HTTP error! status: {response.status_code}", status_code=response.status_code)
    return response.text
