"""
Statistics Service

This service handles retrieving statistics for shortcodes.
Separated from the registry so the API layer only deals with plain data.
"""

from datetime import datetime
from typing import Optional

from shortlinks.core.setting import Settings, settings
from shortlinks.core.timeutils import iso_z
from shortlinks.services.batch_service import build_short_url
from shortlinks.services.registry import ShortcodeRegistry


class StatsService:
    """
    Service for retrieving shortcode statistics.
    """

    def __init__(self, registry: ShortcodeRegistry, config: Settings = settings):
        self.registry = registry
        self.config = config

    def get_stats(self, short_code: str, now: Optional[datetime] = None) -> Optional[dict]:
        """
        Get statistics for a shortcode.

        Returns:
            Dictionary with statistics:
            - shortUrl: The complete short URL
            - originalUrl: The original long URL
            - createdAt / expiry: ISO-8601 timestamps
            - expired: Whether the validity has elapsed
            - totalClicks: Number of recorded clicks
            - clicks: Click events in the order they happened

        Returns None if short code not found.
        """
        record = self.registry.get(short_code)
        if record is None:
            return None

        if now is None:
            now = self.registry.clock()

        clicks = list(record.clicks)
        return {
            "shortUrl": build_short_url(self.config.BASE_URL, record.shortcode),
            "originalUrl": record.original_url,
            "createdAt": iso_z(record.created_at),
            "expiry": iso_z(record.expires_at),
            "expired": record.is_expired(now),
            "totalClicks": len(clicks),
            "clicks": [
                {
                    "timestamp": iso_z(click.timestamp),
                    "source": click.source,
                    "userAgent": click.user_agent,
                }
                for click in clicks
            ],
        }
