"""Folds per-page audits into a site-level :class:`SiteReport`."""

import math
from typing import TYPE_CHECKING, Dict, List, Sequence

from app.models.report import (
    CrawlError,
    CrawledPage,
    CrawlStats,
    PageSummary,
    SiteAggregate,
    SiteIssue,
    SiteReport,
    StopReason,
)
from app.services.scorer import grade_for

if TYPE_CHECKING:
    from app.services.crawler import CrawlJob

# Only the first N critical/warning issues are surfaced as "top issues"
TOP_ISSUES_LIMIT = 20

_TOP_ISSUE_KINDS = {"critical", "warning"}


def _average_score(pages: Sequence[CrawledPage]) -> int:
    """Mean page score rounded half-up, 0 for an empty crawl."""
    if not pages:
        return 0
    mean = sum(p.audit.score for p in pages) / len(pages)
    return max(0, int(math.floor(mean + 0.5)))


def aggregate(
    pages: Sequence[CrawledPage],
    job: "CrawlJob",
    errors: Sequence[CrawlError] = (),
    stop_reason: StopReason = "exhausted",
) -> SiteReport:
    """Build the site report for *pages* crawled under *job*.

    Issues keep their discovery order (page order, then checklist order) both
    in ``issues_by_category`` and in ``top_issues``; recommendations are the
    first-seen-ordered union of every page's recommendations.
    """
    all_issues: List[SiteIssue] = []
    issues_by_category: Dict[str, List[SiteIssue]] = {}
    recommendations: List[str] = []
    seen_recommendations: set = set()

    for page in pages:
        for issue in page.audit.issues:
            tagged = SiteIssue(url=page.url, **issue.model_dump())
            all_issues.append(tagged)
            issues_by_category.setdefault(issue.category, []).append(tagged)
        for rec in page.audit.recommendations:
            if rec not in seen_recommendations:
                seen_recommendations.add(rec)
                recommendations.append(rec)

    average_score = _average_score(pages)
    top_issues = [i for i in all_issues if i.kind in _TOP_ISSUE_KINDS][:TOP_ISSUES_LIMIT]

    return SiteReport(
        start_url=job.seed_url,
        crawl_stats=CrawlStats(
            pages_crawled=len(pages),
            max_depth=job.max_depth,
            max_pages=job.max_pages,
            actual_depth=max((p.depth for p in pages), default=0),
            error_count=len(errors),
            stop_reason=stop_reason,
        ),
        aggregate=SiteAggregate(
            average_score=average_score,
            grade=grade_for(average_score),
            total_issues=len(all_issues),
            total_recommendations=len(recommendations),
            issues_by_category=issues_by_category,
            top_issues=top_issues,
            recommendations=recommendations,
        ),
        pages=[
            PageSummary(
                url=p.url,
                depth=p.depth,
                score=p.audit.score,
                grade=p.audit.grade,
                issue_count=len(p.audit.issues),
            )
            for p in pages
        ],
        detailed_pages=[p.audit for p in pages],
        errors=list(errors),
    )
