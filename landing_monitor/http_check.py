from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

import httpx
import structlog

from landing_monitor.models import HttpResult


logger = structlog.get_logger(__name__)


def _safe_url(url: str) -> str:
    """
    Strip querystrings/fragments so redirect targets stay short in reasons and logs.
    """
    s = (url or "").strip()
    if not s:
        return s
    try:
        parts = urlsplit(s)
        return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    except Exception:
        return s[:500]


async def check_http(
    domain: str,
    client: httpx.AsyncClient,
    *,
    timeout_seconds: float = 15.0,
    scheme: str = "https",
) -> HttpResult:
    """
    Probe the domain root once, without following redirects.

    Only a direct 200 counts as reachable. Transport and TLS failures are
    reported in the reason rather than raised.
    """
    url = f"{scheme}://{domain}/"
    try:
        # Only the status line and headers matter; the body is never read.
        async with client.stream("GET", url, follow_redirects=False, timeout=timeout_seconds) as resp:
            status = resp.status_code
            is_redirect = resp.is_redirect
            location = _safe_url(resp.headers.get("location", ""))
    except httpx.TimeoutException as e:
        return HttpResult(ok=False, reason=f"HTTPS timeout: {type(e).__name__}: {e}")
    except httpx.RequestError as e:
        return HttpResult(ok=False, reason=f"SSL/HTTPS error: {type(e).__name__}: {e}")
    except Exception as e:
        # e.g. httpx.InvalidURL for a malformed registry domain.
        logger.warning("HTTP probe failed unexpectedly", domain=domain, error=str(e))
        return HttpResult(ok=False, reason=f"HTTP check error: {type(e).__name__}: {e}")

    if is_redirect or 300 <= status < 400:
        if location:
            return HttpResult(ok=False, reason=f"Unexpected redirect ({status} -> {location})")
        return HttpResult(ok=False, reason=f"Unexpected redirect ({status})")
    if status != 200:
        return HttpResult(ok=False, reason=f"HTTP {status}")
    return HttpResult(ok=True, reason="HTTP 200")
