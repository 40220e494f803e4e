"""Link resolution helpers used by the crawler to grow its frontier."""

from typing import List, Optional
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

_SKIP_PREFIXES = ("javascript:", "mailto:", "tel:")
_DEFAULT_PORTS = {"http": 80, "https": 443}


def is_crawlable_href(href: str) -> bool:
    """Return False for empty, fragment-only and javascript:/mailto:/tel: hrefs."""
    href = href.strip()
    if not href or href.startswith("#"):
        return False
    return not href.lower().startswith(_SKIP_PREFIXES)


def canonical_url(url: str) -> str:
    """Strip the fragment of *url* and give an empty path the root path ``/``.

    Raises:
        ValueError: if *url* is malformed.
    """
    parsed = urlparse(urldefrag(url)[0])
    if parsed.netloc and not parsed.path:
        parsed = parsed._replace(path="/")
    return parsed.geturl()


def normalize(href: str, base_url: str) -> Optional[str]:
    """Resolve *href* against *base_url* and return its :func:`canonical_url`.

    Handles absolute, root-relative (``/path``), document-relative (``path``)
    and protocol-relative (``//host/path``) references.  Returns *None* when
    the result is malformed or not an http(s) URL.
    """
    try:
        resolved = urljoin(base_url, href.strip())
        url = canonical_url(resolved)
        parsed = urlparse(url)
        # .port raises ValueError on non-numeric or out-of-range ports
        parsed.port
    except ValueError:
        return None
    if parsed.scheme not in _DEFAULT_PORTS or not parsed.hostname:
        return None
    return url


def origin_of(url: str) -> Optional[str]:
    """Return ``scheme://host[:port]`` for *url*, or *None* if it has no host."""
    try:
        parsed = urlparse(url)
        host = parsed.hostname
        port = parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not host:
        return None
    scheme = parsed.scheme.lower()
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def is_same_origin(url: str, base_origin: str) -> bool:
    return origin_of(url) == base_origin


def extract_internal_links(html: str, current_url: str, base_origin: str) -> List[str]:
    """Return the same-origin links of *html* in document order, without duplicates."""
    soup = BeautifulSoup(html, "lxml")
    seen: set = set()
    links: List[str] = []
    for a in soup.find_all("a", href=True):
        href = str(a["href"])
        if not is_crawlable_href(href):
            continue
        url = normalize(href, current_url)
        if url is None or url in seen or not is_same_origin(url, base_origin):
            continue
        seen.add(url)
        links.append(url)
    return links
