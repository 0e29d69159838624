"""
Tests for batch submission: ordering, partial success, in-batch collision
handling and the log sink's lack of influence on results.
"""

import re
from datetime import timedelta

import pytest

from conftest import FIXED_NOW, BrokenLogSink, ConstantRandom
from shortlinks.core.exceptions import BatchSizeError
from shortlinks.domain.models import EntryStatus, UrlEntry
from shortlinks.services.batch_service import BatchShorteningService, build_short_url
from shortlinks.services.registry import ShortcodeRegistry


@pytest.fixture
def service(registry, sink, config):
    return BatchShorteningService(registry, log_sink=sink, config=config)


class TestSubmit:

    def test_default_entry_registered(self, service, registry):
        results = service.submit([UrlEntry(url="https://example.com", validity="", shortcode="")])

        assert len(results) == 1
        result = results[0]
        assert result.status == EntryStatus.registered
        assert re.fullmatch(r"[0-9a-zA-Z]{6}", result.shortcode)
        assert result.expires_at == FIXED_NOW + timedelta(minutes=30)
        assert result.short_url == f"http://sho.rt/{result.shortcode}"
        assert registry.get(result.shortcode).original_url == "https://example.com"

    def test_results_follow_submission_order(self, service):
        entries = [
            UrlEntry(url="https://a.example.com", shortcode="first"),
            UrlEntry(url="https://b.example.com", validity="5"),
            UrlEntry(url="https://c.example.com", shortcode="third"),
        ]
        results = service.submit(entries, now=FIXED_NOW)

        assert [result.index for result in results] == [0, 1, 2]
        assert [result.original_url for result in results] == [entry.url for entry in entries]
        assert results[1].expires_at == FIXED_NOW + timedelta(minutes=5)

    def test_partial_success(self, service, registry):
        """Invalid entries are rejected without touching siblings or the registry."""
        results = service.submit([
            UrlEntry(url="not-a-url", validity="10", shortcode="abc"),
            UrlEntry(url="https://ok.example.com", shortcode="okcode"),
        ])

        assert results[0].status == EntryStatus.rejected
        assert results[0].errors == {"url": "Invalid URL format"}
        assert results[0].error_codes == {"url": "invalid_url"}
        assert results[0].shortcode is None
        assert "abc" not in registry

        assert results[1].status == EntryStatus.registered
        assert len(registry) == 1

    def test_custom_code_repeated_in_batch(self, service, registry):
        results = service.submit([
            UrlEntry(url="https://one.example.com", shortcode="same"),
            UrlEntry(url="https://two.example.com", shortcode="same"),
        ])

        assert results[0].ok
        assert results[1].status == EntryStatus.rejected
        assert results[1].errors == {"shortcode": "Shortcode already in use"}
        assert registry.get("same").original_url == "https://one.example.com"

    def test_generated_code_requested_later_in_batch(self, config, sink):
        """A later entry asking for the code generated for an earlier one is rejected."""
        registry = ShortcodeRegistry(config=config, clock=lambda: FIXED_NOW, rng=ConstantRandom("a"))
        service = BatchShorteningService(registry, log_sink=sink, config=config)

        results = service.submit([
            UrlEntry(url="https://one.example.com"),
            UrlEntry(url="https://two.example.com", shortcode="aaaaaa"),
        ])

        assert results[0].shortcode == "aaaaaa"
        assert results[1].status == EntryStatus.rejected
        assert results[1].error_codes == {"shortcode": "duplicate_shortcode"}
        assert len(registry) == 1

    def test_codes_from_previous_batches_are_known(self, service):
        service.submit([UrlEntry(url="https://example.com", shortcode="keep")])
        results = service.submit([UrlEntry(url="https://example.org", shortcode="keep")])
        assert results[0].errors == {"shortcode": "Shortcode already in use"}

    def test_exhaustion_is_a_per_entry_error(self, config, sink):
        config.SHORTCODE_MAX_ATTEMPTS = 3
        registry = ShortcodeRegistry(config=config, clock=lambda: FIXED_NOW, rng=ConstantRandom("z"))
        service = BatchShorteningService(registry, log_sink=sink, config=config)

        results = service.submit([
            UrlEntry(url="https://one.example.com"),
            UrlEntry(url="https://two.example.com"),
            UrlEntry(url="https://three.example.com", shortcode="custom"),
        ])

        assert [result.status for result in results] == [
            EntryStatus.registered,
            EntryStatus.rejected,
            EntryStatus.registered,
        ]
        assert results[1].error_codes == {"shortcode": "shortcode_space_exhausted"}

    @pytest.mark.parametrize("size", [0, 6])
    def test_batch_size_limits(self, service, registry, size):
        entries = [UrlEntry(url=f"https://example.com/{i}") for i in range(size)]
        with pytest.raises(BatchSizeError):
            service.submit(entries)
        assert len(registry) == 0

    def test_five_entries_accepted(self, service):
        entries = [UrlEntry(url=f"https://example.com/{i}") for i in range(5)]
        results = service.submit(entries)
        assert all(result.ok for result in results)
        assert len({result.shortcode for result in results}) == 5


class TestLogging:

    def test_outcomes_reported_to_sink(self, service, sink):
        service.submit([
            UrlEntry(url="https://example.com", shortcode="good"),
            UrlEntry(url="bad"),
        ])

        levels = [level for level, _, _ in sink.events]
        assert levels == ["info", "info", "warn"]
        assert sink.events[1][2] == "Shortened: https://example.com -> good"
        assert all(package == "service" for _, package, _ in sink.events)

    def test_broken_sink_does_not_change_results(self, registry, config):
        entries = [
            UrlEntry(url="https://example.com", shortcode="sinkless"),
            UrlEntry(url="bad"),
        ]
        results = BatchShorteningService(registry, log_sink=BrokenLogSink(), config=config).submit(entries)

        assert results[0].ok
        assert results[1].errors == {"url": "Invalid URL format"}
        assert "sinkless" in registry


def test_build_short_url():
    assert build_short_url("http://localhost:3000/", "abc") == "http://localhost:3000/abc"
    assert build_short_url("http://localhost:3000", "abc") == "http://localhost:3000/abc"


class TestValidityRange:

    def test_oversized_validity_rejected_without_touching_siblings(self, service, registry):
        results = service.submit([
            UrlEntry(url="https://first.example.com", shortcode="first"),
            UrlEntry(url="https://example.com", validity="999999999999"),
            UrlEntry(url="https://last.example.com", validity="9" * 5000),
        ])

        assert results[0].ok
        assert results[1].error_codes == {"validity": "invalid_validity"}
        assert results[2].error_codes == {"validity": "invalid_validity"}
        assert registry.shortcodes() == frozenset({"first"})

    def test_registration_failure_after_validation_is_per_entry(self, service, registry, config):
        """An expiry beyond the datetime range is still only that entry's error."""
        config.MAX_VALIDITY_MINUTES = 10 ** 12

        results = service.submit([
            UrlEntry(url="https://first.example.com", shortcode="first"),
            UrlEntry(url="https://example.com", validity="999999999999"),
            UrlEntry(url="https://third.example.com", shortcode="third"),
        ])

        assert [result.status for result in results] == [
            EntryStatus.registered,
            EntryStatus.rejected,
            EntryStatus.registered,
        ]
        assert results[0].short_url == "http://sho.rt/first"
        assert results[1].errors == {"validity": "Validity must be a positive integer (minutes)"}
        assert registry.shortcodes() == frozenset({"first", "third"})
