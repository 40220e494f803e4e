from typing import Optional

from pydantic import BaseModel, Field


class AuditRequest(BaseModel):
    url: Optional[str] = Field(
        default=None,
        description="Page to fetch and audit. ``https://`` is assumed when no scheme is given.",
        examples=["example.com/pricing"],
    )
    html: Optional[str] = Field(
        default=None,
        description="Raw HTML to audit instead of fetching *url*.",
    )
