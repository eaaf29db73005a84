from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from setlone.errors import UpstreamError

logger = logging.getLogger(__name__)


def cache_buster() -> dict[str, int]:
    return {"_": int(time.time() * 1000)}


def _get_json_blocking(url: str, headers: dict[str, str], timeout: float) -> Any:
    request = Request(url, headers=headers)
    try:
        with urlopen(request, timeout=timeout) as response:
            return json.loads(response.read().decode("utf-8"))
    except HTTPError as exc:
        raise UpstreamError(f"HTTP error! status: {exc.code}", upstream_status=exc.code, context={"url": url}) from exc
    except (URLError, OSError) as exc:
        raise UpstreamError(f"Upstream transport failure: {exc}", context={"url": url}) from exc
    except ValueError as exc:
        raise UpstreamError("Upstream returned invalid JSON", context={"url": url}) from exc


async def fetch_json(url: str, params: dict[str, Any], headers: dict[str, str], timeout: float) -> Any:
    """GET `url` with a cache-defeating parameter, bounded by `timeout` seconds."""
    query = urlencode({**params, **cache_buster()})
    full_url = f"{url}?{query}"
    started = time.perf_counter()
    try:
        payload = await asyncio.wait_for(
            asyncio.to_thread(_get_json_blocking, full_url, headers, timeout),
            timeout=timeout,
        )
    except asyncio.TimeoutError as exc:
        raise UpstreamError(f"Upstream request timed out after {timeout}s", context={"url": url}) from exc
    logger.debug(
        "upstream_fetch",
        extra={"url": url, "latency_ms": round((time.perf_counter() - started) * 1000, 2)},
    )
    return payload
