"""
Domain Models for URL Shortener Service

This module defines the in-memory models for:
- UrlEntry: One candidate entry of a submitted batch
- ShortcodeRecord: The mapping held by the registry for one shortcode
- ClickEvent: One resolution of a shortcode
- EntryResult: The outcome reported back for one entry of a batch

Design Decisions:
- Pydantic models so API schemas and services share the same validation rules
- Entry fields are kept as raw text; parsing rules live in core.validators
- Records live for the lifetime of the registry (no eviction)
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FieldErrors = Dict[str, str]


class UrlEntry(BaseModel):
    """
    A single entry of a batch submission.

    Fields:
    - url: The long URL to shorten
    - validity: Lifetime in minutes as entered; empty or missing means default
    - shortcode: Custom shortcode; empty or missing means "generate one"

    Numbers sent by JSON clients are coerced to text so the same
    textual validity rule applies to form input and API input.
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    url: str
    validity: Optional[str] = None
    shortcode: Optional[str] = None

    @field_validator("url")
    @classmethod
    def strip_url(cls, value: str) -> str:
        return value.strip()

    @property
    def requested_shortcode(self) -> Optional[str]:
        return self.shortcode or None

    def validity_minutes(self, default: int) -> int:
        """Parsed validity, or ``default`` when none was entered."""
        if not self.validity:
            return default
        return int(self.validity.lstrip("0") or "0")


class ClickEvent(BaseModel):
    """One resolution of a shortcode."""
    timestamp: datetime
    source: str = "direct"
    user_agent: str = ""


class ShortcodeRecord(BaseModel):
    """
    Registry entry for one shortcode.

    Fields:
    - shortcode: Unique key in the registry
    - original_url: The long URL that was shortened
    - created_at: When the shortcode was registered
    - expires_at: created_at plus the entry's validity
    - clicks: Ordered resolutions, empty at creation
    """
    shortcode: str
    original_url: str
    created_at: datetime
    expires_at: datetime
    clicks: List[ClickEvent] = Field(default_factory=list)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class EntryStatus(str, Enum):
    """Lifecycle of one entry: pending -> validated -> registered, or pending -> rejected."""
    pending = "pending"
    validated = "validated"
    registered = "registered"
    rejected = "rejected"


class EntryResult(BaseModel):
    """
    Outcome for one entry of a batch, in submission order.

    Registered entries carry the shortcode, short URL and expiry.
    Rejected entries carry field errors (message per field) and the
    matching error codes; they never touched the registry.
    """
    index: int
    status: EntryStatus = EntryStatus.pending
    original_url: str
    shortcode: Optional[str] = None
    short_url: Optional[str] = None
    expires_at: Optional[datetime] = None
    errors: FieldErrors = Field(default_factory=dict)
    error_codes: Dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == EntryStatus.registered
