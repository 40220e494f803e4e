"""Tests for app.services.aggregator.aggregate."""

from app.models.audit import Issue, PageAudit, PageElements
from app.models.report import CrawlError, CrawledPage
from app.services.aggregator import TOP_ISSUES_LIMIT, aggregate
from app.services.crawler import CrawlJob
from app.services.scorer import grade_for

_JOB = CrawlJob(seed_url="https://example.com/", max_depth=2, max_pages=10)


def _issue(kind: str, category: str, message: str) -> Issue:
    impact = {"critical": "High", "warning": "Medium", "info": "Low"}[kind]
    return Issue(kind=kind, category=category, message=message, impact=impact)


def _page(url: str, score: int, depth: int = 0, issues=(), recs=()) -> CrawledPage:
    audit = PageAudit(
        source_url=url,
        elements=PageElements(),
        score=score,
        grade=grade_for(score),
        issues=list(issues),
        recommendations=list(recs),
    )
    return CrawledPage(url=url, depth=depth, audit=audit)


class TestScores:
    def test_average_rounds_half_up(self):
        report = aggregate([_page("https://example.com/", 74), _page("https://example.com/a", 75)], _JOB)
        assert report.aggregate.average_score == 75
        assert report.aggregate.grade == "C"

    def test_grade_derived_from_average(self):
        pages = [_page("https://example.com/", 95), _page("https://example.com/a", 85)]
        report = aggregate(pages, _JOB)
        assert report.aggregate.average_score == 90
        assert report.aggregate.grade == "A"

    def test_empty_input_is_zero(self):
        report = aggregate([], _JOB)
        assert report.aggregate.average_score == 0
        assert report.aggregate.grade == "F"
        assert report.crawl_stats.actual_depth == 0


class TestIssues:
    def test_issues_grouped_by_category_in_discovery_order(self):
        pages = [
            _page(
                "https://example.com/",
                80,
                issues=[
                    _issue("critical", "title", "Missing page title"),
                    _issue("info", "social", "Missing Open Graph tags"),
                ],
            ),
            _page(
                "https://example.com/a",
                90,
                depth=1,
                issues=[_issue("warning", "title", "Title too short (5 characters)")],
            ),
        ]
        report = aggregate(pages, _JOB)
        by_category = report.aggregate.issues_by_category

        assert list(by_category) == ["title", "social"]
        assert [(i.url, i.message) for i in by_category["title"]] == [
            ("https://example.com/", "Missing page title"),
            ("https://example.com/a", "Title too short (5 characters)"),
        ]
        assert report.aggregate.total_issues == 3

    def test_top_issues_exclude_info(self):
        pages = [
            _page(
                "https://example.com/",
                80,
                issues=[
                    _issue("info", "heading", "No H2 tags found"),
                    _issue("warning", "content", "Low word count (10 words)"),
                ],
            )
        ]
        top = aggregate(pages, _JOB).aggregate.top_issues
        assert [i.kind for i in top] == ["warning"]

    def test_top_issues_capped(self):
        pages = [
            _page(
                f"https://example.com/p{n}",
                70,
                issues=[_issue("critical", "title", "Missing page title")],
            )
            for n in range(TOP_ISSUES_LIMIT + 5)
        ]
        report = aggregate(pages, _JOB)
        assert len(report.aggregate.top_issues) == TOP_ISSUES_LIMIT
        assert report.aggregate.top_issues[0].url == "https://example.com/p0"
        assert report.aggregate.total_issues == TOP_ISSUES_LIMIT + 5


class TestRecommendationsAndStats:
    def test_recommendations_deduplicated_first_seen(self):
        pages = [
            _page("https://example.com/", 80, recs=["Add H2 tags", "Add a title"]),
            _page("https://example.com/a", 80, recs=["Add a title", "Add alt text"]),
        ]
        agg = aggregate(pages, _JOB).aggregate
        assert agg.recommendations == ["Add H2 tags", "Add a title", "Add alt text"]
        assert agg.total_recommendations == 3

    def test_crawl_stats_and_page_summaries(self):
        pages = [
            _page("https://example.com/", 80, issues=[_issue("info", "social", "x")]),
            _page("https://example.com/a", 60, depth=1),
            _page("https://example.com/a/b", 50, depth=2),
        ]
        errors = [CrawlError(url="https://example.com/broken", message="Page not found (404).")]
        report = aggregate(pages, _JOB, errors, stop_reason="max_pages")

        stats = report.crawl_stats
        assert stats.pages_crawled == 3
        assert stats.actual_depth == 2
        assert stats.error_count == 1
        assert stats.max_depth == 2
        assert stats.max_pages == 10
        assert stats.stop_reason == "max_pages"

        assert [(p.url, p.depth, p.score, p.grade, p.issue_count) for p in report.pages] == [
            ("https://example.com/", 0, 80, "B", 1),
            ("https://example.com/a", 1, 60, "D", 0),
            ("https://example.com/a/b", 2, 50, "F", 0),
        ]
        assert report.errors == errors
        assert report.start_url == "https://example.com/"
