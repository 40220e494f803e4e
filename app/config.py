"""Runtime settings for the audit service.

Every value can be overridden with an ``SEO_*`` environment variable so the
crawler's politeness and time bounds can be tuned per deployment.
"""

import os
from dataclasses import dataclass, field


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return int(raw) if raw else default


@dataclass(frozen=True)
class Settings:
    """Configuration settings for fetching and crawling."""

    # Fetcher
    fetch_timeout: float = field(default_factory=lambda: _env_float("SEO_FETCH_TIMEOUT", 15.0))
    max_content_size: int = field(
        default_factory=lambda: _env_int("SEO_MAX_CONTENT_SIZE", 10 * 1024 * 1024)
    )
    max_redirects: int = field(default_factory=lambda: _env_int("SEO_MAX_REDIRECTS", 5))
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "SEO_USER_AGENT",
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        )
    )

    # Crawler
    crawl_delay: float = field(default_factory=lambda: _env_float("SEO_CRAWL_DELAY", 0.5))
    crawl_time_budget: float = field(
        default_factory=lambda: _env_float("SEO_CRAWL_TIME_BUDGET", 120.0)
    )
    max_pages_hard_limit: int = field(
        default_factory=lambda: _env_int("SEO_MAX_PAGES_HARD_LIMIT", 50)
    )
    max_depth_hard_limit: int = field(
        default_factory=lambda: _env_int("SEO_MAX_DEPTH_HARD_LIMIT", 5)
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.environ.get("SEO_LOG_LEVEL", "INFO").upper())


# Default settings instance
settings = Settings()
