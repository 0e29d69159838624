"""
Domain models shared by the validator, registry, services and API layer.
"""

from shortlinks.domain.models import (
    ClickEvent,
    EntryResult,
    EntryStatus,
    FieldErrors,
    ShortcodeRecord,
    UrlEntry,
)

__all__ = [
    "ClickEvent",
    "EntryResult",
    "EntryStatus",
    "FieldErrors",
    "ShortcodeRecord",
    "UrlEntry",
]
