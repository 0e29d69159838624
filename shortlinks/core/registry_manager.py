"""
Registry Manager

This module manages the process-wide shortcode registry and log sink
used by the HTTP application.

Design:
- One registry per application instance, created on startup
- Shared across all requests in the same instance
- Records live until shutdown (no persistence across restarts)
- The log sink is chosen from settings: remote collector or local logging
"""

import logging
from typing import Optional

from shortlinks.core.setting import settings
from shortlinks.services.log_sink import LogSink, RemoteLogSink, StdlibLogSink
from shortlinks.services.registry import ShortcodeRegistry

logger = logging.getLogger(__name__)

# Global registry instance (initialized on startup)
_registry: Optional[ShortcodeRegistry] = None

# Global log sink (initialized on startup)
_log_sink: Optional[LogSink] = None


async def get_registry() -> Optional[ShortcodeRegistry]:
    """
    Get the global shortcode registry.

    Returns:
        ShortcodeRegistry instance if initialized, None otherwise
    """
    return _registry


async def get_log_sink() -> Optional[LogSink]:
    """
    Get the global log sink.

    Returns:
        LogSink instance if initialized, None otherwise
    """
    return _log_sink


def build_log_sink() -> LogSink:
    if settings.LOG_COLLECTOR_ENABLED:
        return RemoteLogSink(
            settings.LOG_COLLECTOR_URL,
            stack=settings.LOG_STACK,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
        )
    return StdlibLogSink()


async def initialize_registry() -> None:
    """Create the global registry and log sink."""
    global _registry, _log_sink

    if _registry is not None:
        logger.warning("Shortcode registry already initialized")
        return

    _registry = ShortcodeRegistry(config=settings)
    _log_sink = build_log_sink()
    logger.info(
        f"Shortcode registry initialized: "
        f"log_sink={_log_sink.__class__.__name__}, "
        f"max_batch={settings.MAX_URLS_PER_BATCH}"
    )


async def shutdown_registry() -> None:
    """Drop the registry and release the log sink."""
    global _registry, _log_sink

    if _log_sink is not None:
        try:
            _log_sink.close()
        except Exception as e:
            logger.warning(f"Failed to close log sink: {e}")

    if _registry is not None:
        logger.info(f"Shutting down shortcode registry ({len(_registry)} shortcodes dropped)")

    _registry = None
    _log_sink = None
