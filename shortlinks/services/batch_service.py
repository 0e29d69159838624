"""
Batch Shortening Service

This service handles one form submission (a batch of up to five entries):
- Validating every entry against the shortcodes already taken
- Registering valid entries in submission order
- Reporting a result per entry (registered or rejected with field errors)

Design Decisions:
- Partial success: a rejected entry never aborts its siblings
- Codes chosen earlier in a batch count as taken for later entries
- Rejected entries never mutate the registry
- Every outcome is reported to the injected log sink (best effort)
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Set

from shortlinks.core.exceptions import BatchSizeError, EntryFieldError
from shortlinks.core.setting import Settings, settings
from shortlinks.core.validators import collect_entry_errors
from shortlinks.domain.models import EntryResult, EntryStatus, UrlEntry
from shortlinks.services.log_sink import LogLevel, LogSink, NullLogSink
from shortlinks.services.registry import ShortcodeRegistry

logger = logging.getLogger(__name__)

LOG_PACKAGE = "service"


def build_short_url(base_url: str, shortcode: str) -> str:
    return f"{base_url.rstrip('/')}/{shortcode}"


class BatchShorteningService:
    """
    Validates and registers a batch of entries.

    Separated from the API layer so the same rules apply to the form
    endpoint, the single-URL endpoint and tests.
    """

    def __init__(
        self,
        registry: ShortcodeRegistry,
        log_sink: Optional[LogSink] = None,
        config: Settings = settings,
    ):
        """
        Initialize the service.

        Args:
            registry: Registry receiving the valid entries
            log_sink: Sink for outcome events (discarded if omitted)
            config: Settings providing batch size, default validity and base URL
        """
        self.registry = registry
        self.log_sink = log_sink or NullLogSink()
        self.config = config

    def submit(
        self,
        entries: Sequence[UrlEntry],
        now: Optional[datetime] = None,
    ) -> List[EntryResult]:
        """
        Process a batch of entries in order.

        Args:
            entries: Between 1 and MAX_URLS_PER_BATCH entries
            now: Creation time for every record of the batch (defaults to the registry clock)

        Returns:
            One EntryResult per entry, in submission order

        Raises:
            BatchSizeError: If the batch is empty or too large (nothing is registered)
        """
        if not entries or len(entries) > self.config.MAX_URLS_PER_BATCH:
            raise BatchSizeError(len(entries), self.config.MAX_URLS_PER_BATCH)

        if now is None:
            now = self.registry.clock()

        self._emit(LogLevel.info, f"Submitting {len(entries)} URL entries")

        known: Set[str] = set(self.registry.shortcodes())
        results = []
        for index, entry in enumerate(entries):
            result = self._process_entry(index, entry, known, now)
            if result.shortcode:
                known.add(result.shortcode)
            results.append(result)

        registered = sum(1 for result in results if result.ok)
        logger.info(f"Batch processed: {registered}/{len(results)} registered")
        return results

    def _process_entry(
        self,
        index: int,
        entry: UrlEntry,
        known: Set[str],
        now: datetime,
    ) -> EntryResult:
        result = EntryResult(index=index, original_url=entry.url)

        errors = collect_entry_errors(entry, known, self.config)
        if errors:
            return self._reject(result, errors)
        result.status = EntryStatus.validated

        try:
            record = self.registry.register(
                entry.url,
                entry.validity_minutes(self.config.DEFAULT_VALIDITY_MINUTES),
                shortcode=entry.requested_shortcode,
                now=now,
            )
        except EntryFieldError as e:
            return self._reject(result, [e])

        result.status = EntryStatus.registered
        result.shortcode = record.shortcode
        result.short_url = build_short_url(self.config.BASE_URL, record.shortcode)
        result.expires_at = record.expires_at
        self._emit(LogLevel.info, f"Shortened: {entry.url} -> {record.shortcode}")
        return result

    def _reject(self, result: EntryResult, errors: List[EntryFieldError]) -> EntryResult:
        result.status = EntryStatus.rejected
        result.errors = {error.field: error.message for error in errors}
        result.error_codes = {error.field: error.code for error in errors}
        self._emit(
            LogLevel.warn,
            f"Rejected entry {result.index} ({result.original_url}): "
            + ", ".join(f"{field}: {message}" for field, message in result.errors.items()),
        )
        return result

    def _emit(self, level: LogLevel, message: str) -> None:
        # A broken sink must never change the outcome of a submission
        try:
            self.log_sink.log(level, LOG_PACKAGE, message)
        except Exception as e:
            logger.warning(f"Log sink failed: {e}")
