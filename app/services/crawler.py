"""Site crawler: BFS-audits the pages on the same origin as a seed URL."""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Deque, List, NamedTuple, Optional, Set, Union
from app.config import settings
from app.models.report import CrawlError, CrawledPage, SiteReport, StopReason
from app.services.aggregator import aggregate
from app.services.auditor import audit_html
from app.services.errors import AuditError, FetchError, NoPagesCrawledError
from app.services.fetcher import Fetcher, ensure_scheme, fetch_url
from app.services.links import canonical_url, extract_internal_links, origin_of

logger = logging.getLogger(__name__)

# The frontier may hold at most this many entries per page still allowed,
# counting completed pages, so link-heavy sites cannot grow it without bound
FRONTIER_FACTOR = 2


@dataclass(frozen=True)
class CrawlJob:
    seed_url: str
    max_depth: int = 3
    max_pages: int = 10

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.max_pages < 1:
            raise ValueError("max_pages must be >= 1")


class FrontierEntry(NamedTuple):
    url: str
    depth: int


@dataclass
class CrawlState:
    """Mutable bookkeeping of one in-flight crawl."""

    visited: Set[str] = field(default_factory=set)
    queue: Deque[FrontierEntry] = field(default_factory=deque)
    completed: List[CrawledPage] = field(default_factory=list)
    errors: List[CrawlError] = field(default_factory=list)


async def _pause(delay: float, cancel: Optional[asyncio.Event]) -> None:
    """Sleep for *delay* seconds, waking up early if *cancel* gets set."""
    if delay <= 0:
        return
    if cancel is None:
        await asyncio.sleep(delay)
        return
    try:
        await asyncio.wait_for(cancel.wait(), timeout=delay)
    except asyncio.TimeoutError:
        pass


def _enqueue_links(state: CrawlState, links: List[str], depth: int, max_pages: int) -> int:
    added = 0
    for link in links:
        if link in state.visited:
            continue
        if len(state.queue) + len(state.completed) >= FRONTIER_FACTOR * max_pages:
            break
        state.queue.append(FrontierEntry(link, depth))
        added += 1
    return added


async def crawl(
    job: CrawlJob,
    *,
    fetcher: Fetcher = fetch_url,
    delay: Optional[float] = None,
    time_budget: Optional[float] = None,
    cancel: Optional[asyncio.Event] = None,
) -> SiteReport:
    """Audit the pages reachable from ``job.seed_url`` breadth-first.

    The crawl stops when the frontier is empty, ``job.max_pages`` pages have
    been audited, *time_budget* seconds have elapsed, or *cancel* is set.  The
    last two are clean early terminations: the report covers what was audited
    so far.  Pages that fail to fetch are recorded in ``errors`` and never
    retried.

    Raises:
        FetchError: if the seed URL is not a valid http(s) URL.
        NoPagesCrawledError: if not a single page could be audited.
    """
    delay = settings.crawl_delay if delay is None else delay
    time_budget = settings.crawl_time_budget if time_budget is None else time_budget

    try:
        seed = canonical_url(ensure_scheme(job.seed_url))
    except ValueError:
        seed = ""
    base_origin = origin_of(seed)
    if base_origin is None:
        raise FetchError("invalid_url", f"Invalid starting URL: {job.seed_url}")
    job = replace(job, seed_url=seed)

    state = CrawlState(queue=deque([FrontierEntry(seed, 0)]))
    started_at = time.monotonic()
    stop_reason: StopReason = "exhausted"

    logger.info(
        "Crawler: starting at %s (max_depth=%d, max_pages=%d)", seed, job.max_depth, job.max_pages
    )

    while state.queue:
        if len(state.completed) >= job.max_pages:
            stop_reason = "max_pages"
            break
        if cancel is not None and cancel.is_set():
            stop_reason = "cancelled"
            break
        if time.monotonic() - started_at >= time_budget:
            stop_reason = "deadline"
            break

        url, depth = state.queue.popleft()
        if url in state.visited or depth > job.max_depth:
            continue
        state.visited.add(url)

        logger.info(
            "Crawler: [depth %d] auditing %s (%d/%d)",
            depth, url, len(state.completed) + 1, job.max_pages,
        )
        try:
            html = await fetcher(url)
            audit = audit_html(html, url)
        except AuditError as exc:
            logger.warning("Crawler: skipping %s – %s", url, exc.message)
            state.errors.append(CrawlError(url=url, message=exc.message))
        else:
            state.completed.append(CrawledPage(url=url, depth=depth, audit=audit))
            if depth < job.max_depth and len(state.completed) < job.max_pages:
                links = extract_internal_links(html, url, base_origin)
                added = _enqueue_links(state, links, depth + 1, job.max_pages)
                logger.debug(
                    "Crawler: found %d internal links on %s, queued %d", len(links), url, added
                )

        if state.queue and len(state.completed) < job.max_pages:
            await _pause(delay, cancel)

    if stop_reason == "exhausted" and len(state.completed) >= job.max_pages:
        stop_reason = "max_pages"

    if not state.completed:
        raise NoPagesCrawledError(state.errors)

    logger.info(
        "Crawler: finished %s with %d pages, %d errors (%s)",
        seed, len(state.completed), len(state.errors), stop_reason,
    )
    return aggregate(state.completed, job, state.errors, stop_reason)


async def deep_crawl(
    seed_url: str,
    max_depth: int = 3,
    max_pages: int = 10,
    cancel: Optional[asyncio.Event] = None,
    *,
    fetcher: Fetcher = fetch_url,
    delay: Optional[float] = None,
    time_budget: Optional[float] = None,
) -> Union[SiteReport, AuditError]:
    """Crawl-audit a site, returning the report or the error that stopped it.

    *max_depth* and *max_pages* are clamped to the configured hard limits.
    """
    job = CrawlJob(
        seed_url=seed_url,
        max_depth=min(max(max_depth, 0), settings.max_depth_hard_limit),
        max_pages=min(max(max_pages, 1), settings.max_pages_hard_limit),
    )
    try:
        return await crawl(
            job, fetcher=fetcher, delay=delay, time_budget=time_budget, cancel=cancel
        )
    except AuditError as exc:
        return exc
