from datetime import datetime, timezone
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

IssueKind = Literal["critical", "warning", "info"]
IssueCategory = Literal["title", "meta_description", "heading", "images", "content", "social"]
Impact = Literal["Low", "Medium", "High"]
Grade = Literal["A", "B", "C", "D", "F"]

# source_url used when the caller supplied raw HTML without a URL
HTML_CONTENT_SOURCE = "HTML content provided"


class PageElements(BaseModel):
    """SEO-relevant facts extracted from one HTML document."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    meta_description: str = ""
    h1_tags: List[str] = Field(default_factory=list)
    h2_tags: List[str] = Field(default_factory=list)
    image_total: int = 0
    images_missing_alt: int = 0
    link_count: int = 0
    word_count: int = 0
    has_open_graph: bool = False
    has_twitter_card: bool = False

    @computed_field
    @property
    def h1_count(self) -> int:
        return len(self.h1_tags)

    @computed_field
    @property
    def h2_count(self) -> int:
        return len(self.h2_tags)


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: IssueKind
    category: IssueCategory
    message: str
    impact: Impact


class PageAudit(BaseModel):
    """Outcome of auditing a single page."""

    model_config = ConfigDict(frozen=True)

    source_url: str
    elements: PageElements
    score: int = Field(ge=0, le=100)
    grade: Grade
    issues: List[Issue]
    recommendations: List[str]
    audited_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field
    @property
    def issue_count(self) -> int:
        return len(self.issues)

    @computed_field
    @property
    def recommendation_count(self) -> int:
        return len(self.recommendations)
