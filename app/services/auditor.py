"""Single-page audit orchestration: obtain HTML → extract → score."""

import logging
from typing import Optional, Union

from app.models.audit import HTML_CONTENT_SOURCE, PageAudit
from app.services.errors import AuditError, FetchError, NoContentError, ParseError
from app.services.extractor import extract
from app.services.fetcher import Fetcher, ensure_scheme, fetch_url
from app.services.scorer import grade_for, score_elements

logger = logging.getLogger(__name__)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, (str, bytes)) and not value.strip())


def audit_html(html: str, source_url: str = HTML_CONTENT_SOURCE) -> PageAudit:
    """Audit an HTML document that is already in hand.

    Raises:
        ParseError: if *html* cannot be parsed at all.
    """
    elements = extract(html)
    result = score_elements(elements)
    return PageAudit(
        source_url=source_url,
        elements=elements,
        score=result.score,
        grade=grade_for(result.score),
        issues=result.issues,
        recommendations=result.recommendations,
    )


async def audit_page(
    url: Optional[str] = None,
    html: Optional[str] = None,
    *,
    fetcher: Fetcher = fetch_url,
) -> Union[PageAudit, AuditError]:
    """Audit one page, either from supplied *html* or by fetching *url*.

    Supplied HTML takes precedence; *url* is then only used as the reported
    source.  Failures are returned rather than raised:

    * :class:`FetchError` when *url* could not be retrieved,
    * :class:`NoContentError` when neither input is usable,
    * :class:`ParseError` when the content is not parseable text.
    """
    source_url = ensure_scheme(url) if url and url.strip() else None

    if _is_blank(html):
        if source_url is None:
            return NoContentError()
        try:
            html = await fetcher(source_url)
        except FetchError as exc:
            logger.warning("Audit: failed to fetch %s – %s", source_url, exc.message)
            return exc
        if _is_blank(html):
            return NoContentError(f"No HTML content returned by {source_url}.")

    try:
        return audit_html(html, source_url or HTML_CONTENT_SOURCE)
    except ParseError as exc:
        logger.warning("Audit: could not parse content for %s – %s", source_url, exc.message)
        return exc
