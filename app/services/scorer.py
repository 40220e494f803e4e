"""Rule-based SEO scoring.

A page starts at 100 points and loses points for every rule it breaks.  The
checks always run in the same order (title, meta description, H1, H2, images,
word count, Open Graph, Twitter Card) so the resulting issue list is stable.
"""

from typing import List, NamedTuple

from app.models.audit import Grade, Impact, Issue, IssueCategory, IssueKind, PageElements

MAX_SCORE = 100

TITLE_MIN_LENGTH = 30
TITLE_MAX_LENGTH = 60
META_DESCRIPTION_MIN_LENGTH = 120
META_DESCRIPTION_MAX_LENGTH = 160
MIN_WORD_COUNT = 300

# Per-image deduction; not capped on its own, only the global floor of 0 applies
IMAGE_ALT_DEDUCTION = 2

_GRADE_THRESHOLDS = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))


class ScoreResult(NamedTuple):
    score: int
    issues: List[Issue]
    recommendations: List[str]


def grade_for(score: int) -> Grade:
    """Return the letter grade for a 0–100 *score*."""
    for threshold, grade in _GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


class _Checklist:
    """Accumulates issues, recommendations and deductions for one page."""

    def __init__(self) -> None:
        self.score = MAX_SCORE
        self.issues: List[Issue] = []
        self.recommendations: List[str] = []

    def fail(
        self,
        kind: IssueKind,
        category: IssueCategory,
        message: str,
        impact: Impact,
        deduction: int,
        recommendation: str,
    ) -> None:
        self.issues.append(Issue(kind=kind, category=category, message=message, impact=impact))
        self.score -= deduction
        if recommendation not in self.recommendations:
            self.recommendations.append(recommendation)

    def result(self) -> ScoreResult:
        return ScoreResult(
            score=min(MAX_SCORE, max(0, self.score)),
            issues=self.issues,
            recommendations=self.recommendations,
        )


def _check_title(elements: PageElements, checks: _Checklist) -> None:
    if not elements.title:
        checks.fail(
            "critical", "title", "Missing page title", "High", 15,
            "Add a descriptive <title> tag (50-60 characters recommended)",
        )
        return
    length = len(elements.title)
    if length < TITLE_MIN_LENGTH:
        checks.fail(
            "warning", "title", f"Title too short ({length} characters)", "Medium", 5,
            "Increase title length to 50-60 characters for better SEO",
        )
    elif length > TITLE_MAX_LENGTH:
        checks.fail(
            "warning", "title", f"Title too long ({length} characters)", "Medium", 3,
            "Reduce title length to 50-60 characters to avoid truncation",
        )


def _check_meta_description(elements: PageElements, checks: _Checklist) -> None:
    if not elements.meta_description:
        checks.fail(
            "critical", "meta_description", "Missing meta description", "High", 10,
            "Add a meta description tag (150-160 characters recommended)",
        )
        return
    length = len(elements.meta_description)
    if length < META_DESCRIPTION_MIN_LENGTH:
        checks.fail(
            "warning", "meta_description",
            f"Meta description too short ({length} characters)", "Medium", 3,
            "Increase meta description to 150-160 characters",
        )
    elif length > META_DESCRIPTION_MAX_LENGTH:
        checks.fail(
            "warning", "meta_description",
            f"Meta description too long ({length} characters)", "Medium", 2,
            "Reduce meta description to 150-160 characters",
        )


def _check_headings(elements: PageElements, checks: _Checklist) -> None:
    h1_count = len(elements.h1_tags)
    if h1_count == 0:
        checks.fail(
            "critical", "heading", "Missing H1 tag", "High", 10,
            "Add exactly one H1 tag to your page",
        )
    elif h1_count > 1:
        checks.fail(
            "warning", "heading", f"Multiple H1 tags found ({h1_count})", "Medium", 5,
            "Use only one H1 tag per page for better SEO",
        )

    if not elements.h2_tags:
        checks.fail(
            "info", "heading", "No H2 tags found", "Low", 2,
            "Add H2 tags to structure your content",
        )


def _check_images(elements: PageElements, checks: _Checklist) -> None:
    missing = elements.images_missing_alt
    if missing > 0:
        checks.fail(
            "warning", "images", f"{missing} image(s) missing alt text", "Medium",
            missing * IMAGE_ALT_DEDUCTION,
            f"Add alt text to {missing} image(s) for accessibility and SEO",
        )


def _check_content(elements: PageElements, checks: _Checklist) -> None:
    if elements.word_count < MIN_WORD_COUNT:
        checks.fail(
            "warning", "content", f"Low word count ({elements.word_count} words)", "Medium", 5,
            "Increase content length to at least 300 words for better SEO",
        )


def _check_social(elements: PageElements, checks: _Checklist) -> None:
    if not elements.has_open_graph:
        checks.fail(
            "info", "social", "Missing Open Graph tags", "Low", 3,
            "Add Open Graph meta tags for better social media sharing",
        )
    if not elements.has_twitter_card:
        checks.fail(
            "info", "social", "Missing Twitter Card tags", "Low", 2,
            "Add Twitter Card meta tags for better Twitter sharing",
        )


_CHECKS = (
    _check_title,
    _check_meta_description,
    _check_headings,
    _check_images,
    _check_content,
    _check_social,
)


def score_elements(elements: PageElements) -> ScoreResult:
    """Score *elements* against the fixed rule set.

    Returns:
        A :class:`ScoreResult` with the clamped score, the issues in checklist
        order and the deduplicated recommendations.
    """
    checks = _Checklist()
    for check in _CHECKS:
        check(elements, checks)
    return checks.result()
