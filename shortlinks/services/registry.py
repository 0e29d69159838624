"""
Shortcode Registry

This service owns the in-memory mapping from shortcode to record:
- Confirming custom shortcodes (rejecting duplicates)
- Generating random shortcodes when none is requested
- Computing expiry from the entry's validity
- Recording clicks against existing shortcodes

Design Decisions:
- Base62 alphabet: Uses [0-9a-zA-Z] for maximum URL compatibility
- Random draws, retried on collision, bounded by SHORTCODE_MAX_ATTEMPTS
- Injected clock and random source for deterministic tests
- One lock guards check-then-insert so a key is never written twice
"""

import logging
import random
import threading
from datetime import datetime, timedelta
from typing import Dict, FrozenSet, Iterator, Optional

from shortlinks.core.exceptions import (
    DuplicateShortcodeError,
    InvalidValidityError,
    ShortCodeNotFoundError,
    ShortcodeSpaceExhaustedError,
)
from shortlinks.core.setting import Settings, settings
from shortlinks.core.timeutils import Clock, utc_now
from shortlinks.domain.models import ClickEvent, ShortcodeRecord

logger = logging.getLogger(__name__)


BASE62_CHARS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def generate_shortcode(rng: random.Random, length: int = 6) -> str:
    """
    Draw a random base62 shortcode.

    Args:
        rng: Random source
        length: Number of characters (default: 6)

    Returns:
        A shortcode of exactly ``length`` characters
    """
    return "".join(rng.choice(BASE62_CHARS) for _ in range(length))


class ShortcodeRegistry:
    """
    In-memory registry of shortcodes.

    Shortcode keys are unique at all times. Records are kept for the
    lifetime of the registry; expiry is computed but nothing is evicted.
    """

    def __init__(
        self,
        config: Settings = settings,
        clock: Clock = utc_now,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize an empty registry.

        Args:
            config: Settings providing code length and attempt bound
            clock: Returns the current time when a caller does not pass ``now``
            rng: Random source for generated codes (a fresh ``random.Random`` by default)
        """
        self.config = config
        self.clock = clock
        self.rng = rng or random.Random()
        self._records: Dict[str, ShortcodeRecord] = {}
        self._lock = threading.Lock()

    def __contains__(self, shortcode: object) -> bool:
        return shortcode in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ShortcodeRecord]:
        return iter(list(self._records.values()))

    def shortcodes(self) -> FrozenSet[str]:
        """Snapshot of the shortcodes currently registered."""
        with self._lock:
            return frozenset(self._records)

    def get(self, shortcode: str) -> Optional[ShortcodeRecord]:
        return self._records.get(shortcode)

    def register(
        self,
        original_url: str,
        validity_minutes: int,
        shortcode: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ShortcodeRecord:
        """
        Register a URL under a custom or generated shortcode.

        Args:
            original_url: The long URL to shorten
            validity_minutes: Lifetime of the shortcode in minutes
            shortcode: Custom shortcode; a random one is generated if omitted
            now: Creation time (defaults to the registry clock)

        Returns:
            The created ShortcodeRecord

        Raises:
            InvalidValidityError: If the expiry falls outside the representable range
            DuplicateShortcodeError: If the custom shortcode is already registered
            ShortcodeSpaceExhaustedError: If no free code was drawn within the attempt limit
        """
        created_at = now if now is not None else self.clock()
        try:
            expires_at = created_at + timedelta(minutes=validity_minutes)
        except OverflowError:
            raise InvalidValidityError(str(validity_minutes))

        with self._lock:
            if shortcode:
                if shortcode in self._records:
                    raise DuplicateShortcodeError(shortcode)
                code = shortcode
            else:
                code = self._draw_free_code()

            record = ShortcodeRecord(
                shortcode=code,
                original_url=original_url,
                created_at=created_at,
                expires_at=expires_at,
            )
            self._records[code] = record

        logger.debug(f"Registered {code} -> {original_url} (expires {record.expires_at})")
        return record

    def _draw_free_code(self) -> str:
        max_attempts = self.config.SHORTCODE_MAX_ATTEMPTS
        for _ in range(max_attempts):
            code = generate_shortcode(self.rng, self.config.GENERATED_SHORTCODE_LENGTH)
            if code not in self._records:
                return code
        logger.error(f"No free shortcode after {max_attempts} attempts ({len(self._records)} registered)")
        raise ShortcodeSpaceExhaustedError(max_attempts)

    def record_click(
        self,
        shortcode: str,
        source: str = "direct",
        user_agent: str = "",
        now: Optional[datetime] = None,
    ) -> ClickEvent:
        """
        Append a click to a shortcode's record.

        Raises:
            ShortCodeNotFoundError: If the shortcode is not registered
        """
        with self._lock:
            record = self._records.get(shortcode)
            if record is None:
                raise ShortCodeNotFoundError(shortcode)
            click = ClickEvent(
                timestamp=now if now is not None else self.clock(),
                source=source or "direct",
                user_agent=user_agent or "",
            )
            record.clicks.append(click)
        return click
