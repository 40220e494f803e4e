import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.models.audit import PageAudit
from app.models.audit_request import AuditRequest
from app.models.crawl_request import CrawlAuditRequest
from app.models.report import SiteReport
from app.services.auditor import audit_page
from app.services.crawler import deep_crawl
from app.services.errors import AuditError, FetchError, NoContentError, ParseError
from app.services.fetcher import fetch_url

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()

# FetchError reasons that are the caller's fault rather than the target site's
_FETCH_STATUS = {"invalid_url": 400, "timeout": 504}


def _status_for(error: AuditError) -> int:
    if isinstance(error, NoContentError):
        return 400
    if isinstance(error, ParseError):
        return 422
    if isinstance(error, FetchError):
        return _FETCH_STATUS.get(error.reason, 502)
    return 502


def _raise_for(error: AuditError) -> None:
    raise HTTPException(status_code=_status_for(error), detail=error.to_dict())


@router.post("/audit", response_model=PageAudit, summary="Audit a single page")
@limiter.limit("10/minute")
async def audit(request: Request, body: AuditRequest) -> PageAudit:
    """Audit supplied *html*, or fetch *url* and audit it.

    When a site blocks automated access the response is a 502 whose
    ``detail.reason`` is ``"blocked"``; retry with the page's HTML instead.
    """
    if not body.url and not body.html:
        raise HTTPException(status_code=400, detail="Either URL or HTML content is required.")

    logger.info(
        "Audit request received",
        extra={"url": body.url, "html_supplied": body.html is not None},
    )

    result = await audit_page(body.url, body.html, fetcher=fetch_url)
    if isinstance(result, AuditError):
        logger.warning("Audit failed for %s: %s", body.url, result.message)
        _raise_for(result)
    return result


@router.post(
    "/audit/crawl",
    response_model=SiteReport,
    summary="Crawl a site and audit every page",
    description=(
        "Starting from *url*, follows internal links (same scheme and host) "
        "breadth-first up to `max_depth` levels deep and audits up to "
        "`max_pages` pages.  Returns per-page scores together with a site-level "
        "aggregate and the list of pages that could not be fetched."
    ),
)
@limiter.limit("3/minute")
async def crawl_audit(request: Request, body: CrawlAuditRequest) -> SiteReport:
    logger.info(
        "Crawl audit request received",
        extra={"url": body.url, "max_pages": body.max_pages, "max_depth": body.max_depth},
    )

    result = await deep_crawl(
        body.url, max_depth=body.max_depth, max_pages=body.max_pages, fetcher=fetch_url
    )
    if isinstance(result, AuditError):
        logger.error("Crawl audit failed for %s: %s", body.url, result.message)
        _raise_for(result)
    return result
