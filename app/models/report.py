from datetime import datetime, timezone
from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.audit import Grade, Impact, IssueCategory, IssueKind, PageAudit

StopReason = Literal["exhausted", "max_pages", "deadline", "cancelled"]


class CrawlError(BaseModel):
    """A page that could not be fetched or audited during a crawl."""

    model_config = ConfigDict(frozen=True)

    url: str
    message: str


class CrawledPage(BaseModel):
    """A successful page audit together with the depth it was found at."""

    model_config = ConfigDict(frozen=True)

    url: str
    depth: int = Field(ge=0)
    audit: PageAudit


class SiteIssue(BaseModel):
    """An issue tagged with the URL of the page it was found on."""

    model_config = ConfigDict(frozen=True)

    url: str
    kind: IssueKind
    category: IssueCategory
    message: str
    impact: Impact


class CrawlStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    pages_crawled: int
    max_depth: int
    max_pages: int
    actual_depth: int
    error_count: int
    stop_reason: StopReason = "exhausted"


class SiteAggregate(BaseModel):
    """Site-level summary folded from every crawled page."""

    model_config = ConfigDict(frozen=True)

    average_score: int
    grade: Grade
    total_issues: int
    total_recommendations: int
    issues_by_category: Dict[IssueCategory, List[SiteIssue]]
    top_issues: List[SiteIssue]
    recommendations: List[str]


class PageSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    depth: int
    score: int
    grade: Grade
    issue_count: int


class SiteReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_url: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    crawl_stats: CrawlStats
    aggregate: SiteAggregate
    pages: List[PageSummary]
    detailed_pages: List[PageAudit]
    errors: List[CrawlError] = Field(default_factory=list)
