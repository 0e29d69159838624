"""
Tests for the remote shortening client.

Unit tests use an in-process httpx transport; the integration test sends
the client's requests to this project's own FastAPI app.
"""

import asyncio
import json
import time
from datetime import datetime, timezone

import httpx
import pytest

from conftest import RecordingLogSink
from shortlinks.core import registry_manager
from shortlinks.core.exceptions import BatchSizeError
from shortlinks.domain.models import EntryStatus, UrlEntry
from shortlinks.main import app
from shortlinks.services.log_sink import LogSink
from shortlinks.services.remote_client import RemoteShorteningClient

API_URL = "http://api.test/api/shorten"


def make_client(handler, sink=None, config=None) -> RemoteShorteningClient:
    kwargs = {"config": config} if config is not None else {}
    return RemoteShorteningClient(
        api_url=API_URL,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        log_sink=sink,
        **kwargs,
    )


class TestPayload:

    def test_defaults_and_optional_shortcode(self, config):
        client = make_client(lambda request: httpx.Response(200), config=config)
        assert client.build_payload(UrlEntry(url="https://example.com", validity="")) == {
            "url": "https://example.com",
            "validity": 30,
        }
        assert client.build_payload(UrlEntry(url="https://example.com", validity="5", shortcode="mine")) == {
            "url": "https://example.com",
            "validity": 5,
            "shortcode": "mine",
        }


class TestSubmit:

    @pytest.mark.asyncio
    async def test_successful_entry(self, sink):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(json.loads(request.content))
            return httpx.Response(201, json={"shortUrl": "http://sho.rt/abc123", "expiry": "2025-01-01T12:30:00Z"})

        async with make_client(handler, sink=sink) as client:
            results = await client.submit([UrlEntry(url="https://example.com")])

        assert sent == [{"url": "https://example.com", "validity": 30}]
        result = results[0]
        assert result.status == EntryStatus.registered
        assert result.short_url == "http://sho.rt/abc123"
        assert result.shortcode == "abc123"
        assert result.expires_at == datetime(2025, 1, 1, 12, 30, tzinfo=timezone.utc)
        assert ("info", "api", "Shortened URL created: http://sho.rt/abc123") in sink.events

    @pytest.mark.asyncio
    async def test_api_error_is_per_entry(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            if body.get("shortcode") == "taken":
                return httpx.Response(409, text="shortcode collision")
            return httpx.Response(201, json={"shortUrl": "http://sho.rt/ok1", "expiry": "2025-01-01T12:30:00Z"})

        async with make_client(handler) as client:
            results = await client.submit([
                UrlEntry(url="https://one.example.com", shortcode="taken"),
                UrlEntry(url="https://two.example.com"),
            ])

        assert results[0].status == EntryStatus.rejected
        assert results[0].errors == {"request": "API error: shortcode collision"}
        assert results[0].error_codes == {"request": "api_error"}
        assert results[1].ok

    @pytest.mark.asyncio
    async def test_network_error_is_per_entry(self, sink):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        async with make_client(handler, sink=sink) as client:
            results = await client.submit([UrlEntry(url="https://example.com")])

        assert results[0].errors == {"request": "Network error: Connection refused"}
        assert results[0].error_codes == {"request": "network_error"}
        assert sink.events[-1][0] == "error"

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        async with make_client(lambda request: httpx.Response(200, json={"unexpected": True})) as client:
            results = await client.submit([UrlEntry(url="https://example.com")])
        assert results[0].errors == {"request": "API error: malformed response"}

    @pytest.mark.asyncio
    async def test_invalid_entries_are_not_sent(self):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(201, json={"shortUrl": "http://sho.rt/x1y2z3", "expiry": "2025-01-01T12:30:00Z"})

        async with make_client(handler) as client:
            results = await client.submit([
                UrlEntry(url="not-a-url"),
                UrlEntry(url="https://example.com", validity="0"),
                UrlEntry(url="https://example.com"),
            ])

        assert len(sent) == 1
        assert results[0].errors == {"url": "Invalid URL format"}
        assert results[1].errors == {"validity": "Validity must be a positive integer (minutes)"}
        assert results[2].ok

    @pytest.mark.asyncio
    async def test_too_many_entries(self):
        async with make_client(lambda request: httpx.Response(500)) as client:
            with pytest.raises(BatchSizeError):
                await client.submit([UrlEntry(url="https://example.com")] * 6)


@pytest.mark.asyncio
async def test_client_against_local_api():
    """The client speaks the same wire format the service exposes."""
    await registry_manager.initialize_registry()
    try:
        sink = RecordingLogSink()
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://local.test") as http:
            client = RemoteShorteningClient(
                api_url="http://local.test/api/shorten", client=http, log_sink=sink
            )
            results = await client.submit([
                UrlEntry(url="https://example.com", shortcode="viaapi"),
                UrlEntry(url="https://example.org", shortcode="viaapi"),
                UrlEntry(url="https://example.net", validity="5"),
            ])
    finally:
        await registry_manager.shutdown_registry()

    assert results[0].ok
    assert results[0].shortcode == "viaapi"
    assert results[1].status == EntryStatus.rejected
    assert results[1].errors["request"].startswith("API error:")
    assert "Shortcode already in use" in results[1].errors["request"]
    assert results[2].ok
    assert (results[2].expires_at - datetime.now(timezone.utc)).total_seconds() <= 5 * 60


class SlowLogSink(LogSink):
    """Blocks on every event, like a sink posting to an unresponsive collector."""

    def __init__(self, delay: float):
        self.delay = delay
        self.messages = []

    def log(self, level, package, message):
        time.sleep(self.delay)
        self.messages.append(message)


@pytest.mark.asyncio
async def test_slow_sink_does_not_block_event_loop():
    sink = SlowLogSink(delay=0.2)
    ticks = []
    done = asyncio.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json={"shortUrl": "http://sho.rt/slow01", "expiry": "2025-01-01T12:30:00Z"})

    async def ticker():
        while not done.is_set():
            ticks.append(time.perf_counter())
            await asyncio.sleep(0.005)

    async def send():
        try:
            async with make_client(handler, sink=sink) as client:
                return await client.submit([UrlEntry(url="https://example.com")])
        finally:
            done.set()

    results, _ = await asyncio.gather(send(), ticker())

    assert results[0].status == EntryStatus.registered
    assert sink.messages == [
        "Form submitted",
        "Sending API request for URL: https://example.com",
        "Shortened URL created: http://sho.rt/slow01",
    ]
    gaps = [later - earlier for earlier, later in zip(ticks, ticks[1:])]
    assert len(ticks) > 10
    assert max(gaps) < 0.15
