"""Error taxonomy shared by the fetcher, the auditor and the crawler.

Every error carries a machine-readable ``kind`` plus a human-readable
``message``.  The engine's public functions return these objects instead of
raising them so callers can translate them into their own transport (HTTP
status codes, CLI exit codes, …).
"""

from typing import Any, Dict, List, Literal, Optional, Sequence

FetchReason = Literal[
    "blocked",
    "not_found",
    "server_error",
    "unreachable",
    "timeout",
    "invalid_url",
    "too_large",
    "http_error",
]


class AuditError(Exception):
    """Base class for every failure the audit engine can report."""

    kind: str = "audit_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class FetchError(AuditError):
    """The HTML for a URL could not be retrieved."""

    kind = "fetch_error"

    def __init__(
        self,
        reason: FetchReason,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason
        if self.status_code is not None:
            data["status_code"] = self.status_code
        return data


class NoContentError(AuditError):
    kind = "no_content"

    def __init__(self, message: str = "Either URL or HTML content must be provided.") -> None:
        super().__init__(message)


class ParseError(AuditError):
    kind = "parse_error"


class NoPagesCrawledError(AuditError):
    """A deep crawl finished without a single successfully audited page."""

    kind = "no_pages_crawled"

    def __init__(self, errors: Sequence[Any] = ()) -> None:
        super().__init__("No pages were successfully crawled.")
        self.errors: List[Any] = list(errors)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["errors"] = [
            e.model_dump() if hasattr(e, "model_dump") else e for e in self.errors
        ]
        return data
