"""HTTP fetcher: the default "fetch HTML for URL" collaborator of the engine.

Every failure is raised as a classified :class:`FetchError` so the auditor can
report a precise reason (blocked, not found, server error, unreachable, …).
"""

import ipaddress
import logging
import socket
from typing import Awaitable, Callable, Dict, Optional
from urllib.parse import urljoin, urlparse

import httpx

from app.config import settings
from app.services.errors import FetchError

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = {"http", "https"}

# Any callable with this shape can stand in for fetch_url (tests, caches, …)
Fetcher = Callable[[str], Awaitable[str]]

_BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "max-age=0",
}


def ensure_scheme(url: str) -> str:
    """Prefix *url* with ``https://`` unless it already starts with http(s)."""
    url = url.strip()
    if not url.lower().startswith(("http://", "https://")):
        return "https://" + url
    return url


def _is_private_address(hostname: str) -> bool:
    """Return True if *hostname* resolves to a private, loopback, or link-local address."""
    try:
        infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror:
        return False

    for info in infos:
        # Strip IPv6 zone IDs (e.g. "::1%eth0" → "::1")
        raw_ip = info[4][0].split("%")[0]
        try:
            addr = ipaddress.ip_address(raw_ip)
        except ValueError:
            continue
        if addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved:
            return True
    return False


def _validate_url(url: str) -> None:
    """Raise FetchError if *url* fails SSRF / scheme validation."""
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as exc:
        raise FetchError("invalid_url", f"Malformed URL: {url}") from exc

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise FetchError(
            "invalid_url", f"Scheme '{parsed.scheme}' is not allowed. Use http or https."
        )
    if not hostname:
        raise FetchError("invalid_url", "URL must have a valid hostname.")
    if _is_private_address(hostname):
        raise FetchError("invalid_url", "Requests to private/internal addresses are not allowed.")


def _status_error(status_code: int, reason_phrase: str) -> FetchError:
    """Map an HTTP error status to a FetchError with a user-facing message."""
    if status_code == 403:
        return FetchError(
            "blocked",
            "Access forbidden (403): the website blocked automated access. "
            "Try supplying the HTML content directly or use a different URL.",
            status_code,
        )
    if status_code == 404:
        return FetchError(
            "not_found", "Page not found (404). Check that the URL is correct.", status_code
        )
    if status_code >= 500:
        return FetchError(
            "server_error",
            f"Server error ({status_code}). The website server encountered an error.",
            status_code,
        )
    return FetchError(
        "http_error",
        f"HTTP {status_code} {reason_phrase or 'Unknown Error'}. Failed to fetch URL.",
        status_code,
    )


async def _fetch(
    url: str,
    headers: Dict[str, str],
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport],
) -> str:
    current_url = url
    async with httpx.AsyncClient(
        follow_redirects=False, timeout=timeout, headers=headers, transport=transport
    ) as client:
        for _ in range(settings.max_redirects + 1):
            try:
                async with client.stream("GET", current_url) as response:
                    if response.is_redirect:
                        location = response.headers.get("location", "")
                        next_url = urljoin(current_url, location)
                        _validate_url(next_url)
                        current_url = next_url
                        continue

                    if response.status_code >= 400:
                        raise _status_error(response.status_code, response.reason_phrase)

                    content_length = response.headers.get("content-length")
                    if content_length and int(content_length) > settings.max_content_size:
                        raise FetchError("too_large", "Response body exceeds the maximum allowed size.")

                    chunks = []
                    total = 0
                    async for chunk in response.aiter_bytes():
                        total += len(chunk)
                        if total > settings.max_content_size:
                            raise FetchError(
                                "too_large", "Response body exceeds the maximum allowed size."
                            )
                        chunks.append(chunk)

                    return b"".join(chunks).decode(errors="replace")
            except httpx.TimeoutException as exc:
                raise FetchError("timeout", f"Timed out fetching {current_url}.") from exc
            except httpx.RequestError as exc:
                raise FetchError(
                    "unreachable",
                    "No response from server. Check your internet connection "
                    "or the URL might be unreachable.",
                ) from exc

    raise FetchError("http_error", "Too many redirects.")


async def fetch_url(
    url: str,
    *,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Fetch *url* and return the response body as a string.

    Redirects are followed manually so that every redirect destination is
    validated against the SSRF rules before the next request is made.  A 403
    is retried once with minimal headers, since some sites reject the full
    browser header set but accept a bare user agent.

    Raises:
        FetchError: on validation, network, HTTP status or size failures.
    """
    _validate_url(url)
    timeout = settings.fetch_timeout if timeout is None else timeout

    try:
        return await _fetch(
            url, {"User-Agent": settings.user_agent, **_BROWSER_HEADERS}, timeout, transport
        )
    except FetchError as exc:
        if exc.reason != "blocked":
            raise
        logger.info("403 from %s, retrying with minimal headers", url)

    return await _fetch(url, {"User-Agent": settings.user_agent}, timeout, transport)
