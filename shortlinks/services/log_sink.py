"""
Log Sink

Structured log events (stack, level, package, message) are handed to a
LogSink. Services receive the sink as a dependency instead of calling a
module-level function, so tests can swap it out and assert that a failing
collector never changes what the services return.

Implementations:
- RemoteLogSink: POSTs each event as JSON to the log collector
- StdlibLogSink: Forwards events to the standard logging module
- NullLogSink: Discards events

Delivery is best effort. Collector failures are reported on the local
logger only and never raised to the caller.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Union

import httpx

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warn = "warn"
    error = "error"
    fatal = "fatal"


class LogStack(str, Enum):
    frontend = "frontend"
    backend = "backend"


_STDLIB_LEVELS = {
    LogLevel.debug: logging.DEBUG,
    LogLevel.info: logging.INFO,
    LogLevel.warn: logging.WARNING,
    LogLevel.error: logging.ERROR,
    LogLevel.fatal: logging.CRITICAL,
}


class LogSink(ABC):
    """Capability for emitting structured log events."""

    @abstractmethod
    def log(self, level: Union[LogLevel, str], package: str, message: str) -> None:
        """
        Emit one log event.

        Args:
            level: One of debug, info, warn, error, fatal
            package: Component emitting the event (e.g. "registry", "api")
            message: Human readable description
        """
        pass

    def close(self) -> None:
        pass


class NullLogSink(LogSink):
    """Sink that drops every event."""

    def log(self, level: Union[LogLevel, str], package: str, message: str) -> None:
        return None


class StdlibLogSink(LogSink):
    """Sink that forwards events to a standard library logger."""

    def __init__(self, name: str = "shortlinks.events"):
        self.logger = logging.getLogger(name)

    def log(self, level: Union[LogLevel, str], package: str, message: str) -> None:
        level = LogLevel(level)
        self.logger.log(_STDLIB_LEVELS[level], f"[{package}] {message}")


class RemoteLogSink(LogSink):
    """
    Sink that ships events to a remote log collector over HTTP.

    Each event is sent as ``{"stack", "level", "package", "message"}``.
    A non-2xx response or a transport error is logged locally and dropped.
    """

    def __init__(
        self,
        url: str,
        stack: Union[LogStack, str] = LogStack.backend,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize the remote sink.

        Args:
            url: Collector endpoint
            stack: Stack label attached to every event
            client: HTTP client to use (one is created and owned if omitted)
            timeout: Request timeout when the sink creates its own client
        """
        self.url = url
        self.stack = LogStack(stack)
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)

    def log(self, level: Union[LogLevel, str], package: str, message: str) -> None:
        payload = {
            "stack": self.stack.value,
            "level": LogLevel(level).value,
            "package": package,
            "message": message,
        }
        try:
            response = self.client.post(self.url, json=payload)
            if not response.is_success:
                logger.warning(
                    f"Failed to send log: {response.status_code} {response.reason_phrase}"
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Logging error: {e}")

    def close(self) -> None:
        if self._owns_client:
            self.client.close()
