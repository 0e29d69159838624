"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.

Field names follow the JSON contract of the shortening API
(``shortUrl``, ``expiry``) rather than Python naming.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from shortlinks.core.timeutils import iso_z
from shortlinks.domain.models import EntryResult, UrlEntry


class ShortenRequest(BaseModel):
    """Request model for one entry (single endpoint or batch item)."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    url: str = Field(..., description="The long URL to shorten")
    validity: Optional[str] = Field(None, description="Minutes (default 30)")
    shortcode: Optional[str] = Field(None, description="Custom shortcode")

    def to_entry(self) -> UrlEntry:
        return UrlEntry(url=self.url, validity=self.validity, shortcode=self.shortcode)


class ShortenResponse(BaseModel):
    """Response model for the single URL shortening endpoint."""
    shortUrl: str = Field(..., description="The complete short URL")
    shortcode: str = Field(..., description="The registered shortcode")
    expiry: str = Field(..., description="Expiry time (ISO-8601, UTC)")


class BatchShortenRequest(BaseModel):
    """Request model for a form submission."""
    entries: List[ShortenRequest] = Field(..., description="Entries in submission order")


class EntryResultResponse(BaseModel):
    """Outcome for one entry of a batch."""
    index: int
    status: str
    originalUrl: str
    shortcode: Optional[str] = None
    shortUrl: Optional[str] = None
    expiry: Optional[str] = None
    errors: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: EntryResult) -> "EntryResultResponse":
        return cls(
            index=result.index,
            status=result.status.value,
            originalUrl=result.original_url,
            shortcode=result.shortcode,
            shortUrl=result.short_url,
            expiry=iso_z(result.expires_at) if result.expires_at else None,
            errors=result.errors,
        )


class BatchShortenResponse(BaseModel):
    """Response model for a form submission."""
    results: List[EntryResultResponse]
    registered: int
    rejected: int


class ClickItem(BaseModel):
    timestamp: str
    source: str
    userAgent: str


class StatsResponse(BaseModel):
    """Response model for statistics endpoint."""
    shortUrl: str
    originalUrl: str
    createdAt: str
    expiry: str
    expired: bool
    totalClicks: int
    clicks: List[ClickItem]
