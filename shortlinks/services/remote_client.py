"""
Remote Shortening Client

Alternate path for a batch submission: instead of registering entries in
a local registry, each valid entry is POSTed to a shortening API.

Wire format:
- Request:  {"url": str, "validity": int, "shortcode": str (optional)}
- Response: {"shortUrl": str, "expiry": ISO-8601 str}

Entries are validated locally first (format only; uniqueness is the
server's concern) and sent one at a time in submission order. A non-2xx
response or a transport failure becomes an error on that entry only.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

import httpx

from shortlinks.core.exceptions import BatchSizeError
from shortlinks.core.setting import Settings, settings
from shortlinks.core.timeutils import parse_iso
from shortlinks.core.validators import collect_entry_errors
from shortlinks.domain.models import EntryResult, EntryStatus, UrlEntry
from shortlinks.services.log_sink import LogLevel, LogSink, NullLogSink

logger = logging.getLogger(__name__)

LOG_PACKAGE = "api"
REQUEST_ERROR_FIELD = "request"


class RemoteShorteningClient:
    """
    Client for a remote shortening API.

    Usage:
        async with RemoteShorteningClient() as client:
            results = await client.submit(entries)
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        log_sink: Optional[LogSink] = None,
        config: Settings = settings,
    ):
        """
        Initialize the client.

        Args:
            api_url: Shortening endpoint (defaults to SHORTEN_API_URL)
            client: HTTP client to use (one is created and owned if omitted)
            log_sink: Sink for request outcome events
            config: Settings providing limits, defaults and timeouts
        """
        self.config = config
        self.api_url = api_url or config.SHORTEN_API_URL
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=config.REQUEST_TIMEOUT_SECONDS)
        self.log_sink = log_sink or NullLogSink()

    async def __aenter__(self) -> "RemoteShorteningClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def build_payload(self, entry: UrlEntry) -> dict:
        payload = {
            "url": entry.url,
            "validity": entry.validity_minutes(self.config.DEFAULT_VALIDITY_MINUTES),
        }
        if entry.shortcode:
            payload["shortcode"] = entry.shortcode
        return payload

    async def submit(self, entries: Sequence[UrlEntry]) -> List[EntryResult]:
        """
        Validate and send a batch of entries, one request per valid entry.

        Returns:
            One EntryResult per entry, in submission order

        Raises:
            BatchSizeError: If the batch is empty or too large (nothing is sent)
        """
        if not entries or len(entries) > self.config.MAX_URLS_PER_BATCH:
            raise BatchSizeError(len(entries), self.config.MAX_URLS_PER_BATCH)

        await self._emit(LogLevel.info, "Form submitted")
        results = []
        for index, entry in enumerate(entries):
            results.append(await self.shorten(entry, index=index))
        return results

    async def shorten(self, entry: UrlEntry, index: int = 0) -> EntryResult:
        """
        Validate and send a single entry.

        Returns:
            A registered result carrying the server's short URL and expiry,
            or a rejected result carrying validation, API or network errors
        """
        result = EntryResult(index=index, original_url=entry.url)

        errors = collect_entry_errors(entry, frozenset(), self.config)
        if errors:
            result.status = EntryStatus.rejected
            result.errors = {error.field: error.message for error in errors}
            result.error_codes = {error.field: error.code for error in errors}
            await self._emit(LogLevel.error, f"Validation failed for URL {entry.url}")
            return result
        result.status = EntryStatus.validated

        await self._emit(LogLevel.info, f"Sending API request for URL: {entry.url}")
        try:
            response = await self.client.post(self.api_url, json=self.build_payload(entry))
        except httpx.HTTPError as e:
            message = str(e) or e.__class__.__name__
            await self._emit(LogLevel.error, f"Network error for URL {entry.url}: {message}")
            return self._fail(result, "network_error", f"Network error: {message}")

        if not response.is_success:
            await self._emit(LogLevel.error, f"API error for URL {entry.url}: {response.text}")
            return self._fail(result, "api_error", f"API error: {response.text}")

        try:
            data = response.json()
            short_url = data["shortUrl"]
            expires_at = parse_iso(data["expiry"])
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Malformed response from {self.api_url}: {e}")
            return self._fail(result, "api_error", "API error: malformed response")

        result.status = EntryStatus.registered
        result.short_url = short_url
        result.shortcode = data.get("shortcode") or short_url.rstrip("/").rsplit("/", 1)[-1]
        result.expires_at = expires_at
        await self._emit(LogLevel.info, f"Shortened URL created: {short_url}")
        return result

    def _fail(self, result: EntryResult, code: str, message: str) -> EntryResult:
        result.status = EntryStatus.rejected
        result.errors = {REQUEST_ERROR_FIELD: message}
        result.error_codes = {REQUEST_ERROR_FIELD: code}
        return result

    async def _emit(self, level: LogLevel, message: str) -> None:
        # Sinks are synchronous; keep their I/O off the event loop
        try:
            await asyncio.to_thread(self.log_sink.log, level, LOG_PACKAGE, message)
        except Exception as e:
            logger.warning(f"Log sink failed: {e}")
