"""
Redirect Service

This service handles shortcode resolution:
- Looking up the original URL
- Refusing expired shortcodes
- Recording a click for every successful resolution
"""

from datetime import datetime
from typing import Optional

from shortlinks.core.exceptions import ShortCodeExpiredError, ShortCodeNotFoundError
from shortlinks.services.registry import ShortcodeRegistry


class RedirectService:
    """
    Service for resolving shortcodes to their original URL.
    """

    def __init__(self, registry: ShortcodeRegistry):
        self.registry = registry

    def resolve(
        self,
        short_code: str,
        source: Optional[str] = None,
        user_agent: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Get the original URL for redirection and record the click.

        Raises:
            ShortCodeNotFoundError: If the shortcode is not registered
            ShortCodeExpiredError: If the shortcode's validity has elapsed
        """
        if now is None:
            now = self.registry.clock()

        record = self.registry.get(short_code)
        if record is None:
            raise ShortCodeNotFoundError(short_code)
        if record.is_expired(now):
            raise ShortCodeExpiredError(short_code)

        self.registry.record_click(
            short_code,
            source=source or "direct",
            user_agent=(user_agent or "")[:500],
            now=now,
        )
        return record.original_url
