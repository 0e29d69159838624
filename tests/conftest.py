"""
Shared fixtures: a pinned clock, seeded random sources and a log sink
that records events instead of shipping them.
"""

import random
from datetime import datetime, timezone

import pytest

from shortlinks.core.setting import Settings
from shortlinks.services.log_sink import LogSink
from shortlinks.services.registry import ShortcodeRegistry

FIXED_NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class RecordingLogSink(LogSink):
    """Sink keeping every event in memory."""

    def __init__(self):
        self.events = []

    def log(self, level, package, message):
        self.events.append((str(getattr(level, "value", level)), package, message))


class BrokenLogSink(LogSink):
    """Sink failing on every call."""

    def log(self, level, package, message):
        raise RuntimeError("collector unreachable")


class ConstantRandom(random.Random):
    """Random source that always draws the same character."""

    def __init__(self, char: str = "a"):
        super().__init__(0)
        self.char = char

    def choice(self, seq):
        return self.char


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def config():
    return Settings(_env_file=None, BASE_URL="http://sho.rt")


@pytest.fixture
def registry(config):
    return ShortcodeRegistry(config=config, clock=lambda: FIXED_NOW, rng=random.Random(42))


@pytest.fixture
def sink():
    return RecordingLogSink()
