from pydantic import BaseModel, Field


class CrawlAuditRequest(BaseModel):
    url: str = Field(
        min_length=1,
        description="Seed URL. ``https://`` is assumed when no scheme is given.",
    )
    max_pages: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum number of pages to audit (1–50).",
    )
    max_depth: int = Field(
        default=3,
        ge=0,
        le=5,
        description="Maximum link depth from the seed URL (0–5).",
    )
