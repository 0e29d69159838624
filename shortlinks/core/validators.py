"""
Input Validators

This module validates the entries of a batch before anything is registered.

Rules (each field is checked independently, so one entry can collect
an error for every field at once):
- url: absolute URL with a scheme and an authority
- validity: optional, digits only, greater than zero and at most MAX_VALIDITY_MINUTES
- shortcode: optional, alphanumeric within the configured length bounds,
  and not already known

All functions here are pure: they never touch the registry and give the
same answer for the same entry and the same set of known shortcodes.
"""

import re
from typing import AbstractSet, List, Optional
from urllib.parse import urlparse

from shortlinks.core.exceptions import (
    DuplicateShortcodeError,
    EntryFieldError,
    InvalidShortcodeFormatError,
    InvalidURLError,
    InvalidValidityError,
)
from shortlinks.core.setting import Settings, settings
from shortlinks.domain.models import FieldErrors, UrlEntry

MAX_URL_LENGTH = 2048

_VALIDITY_PATTERN = re.compile(r"[0-9]+")


def is_valid_url(url: str) -> bool:
    """
    Validate that a string is a well-formed absolute URL.

    Args:
        url: The URL string to validate

    Returns:
        True if the URL has a scheme and an authority, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    if len(url) > MAX_URL_LENGTH:
        return False

    url = url.strip()

    # Surrounding whitespace is trimmed; whitespace inside is not allowed
    if any(ch.isspace() for ch in url):
        return False

    try:
        result = urlparse(url)

        if not result.scheme or not result.netloc:
            return False

        if not result.hostname:
            return False

        # Raises ValueError on a malformed port
        result.port

        return True
    except ValueError:
        return False


def is_valid_validity(validity: Optional[str], config: Settings = settings) -> bool:
    """
    Check that a validity value is a positive whole number of minutes
    no larger than MAX_VALIDITY_MINUTES.
    """
    if validity is None or not _VALIDITY_PATTERN.fullmatch(validity):
        return False
    # Compare digit counts first so huge inputs never reach int()
    digits = validity.lstrip("0")
    if len(digits) > len(str(config.MAX_VALIDITY_MINUTES)):
        return False
    return 0 < int(digits or "0") <= config.MAX_VALIDITY_MINUTES


def shortcode_pattern(min_length: int, max_length: int) -> "re.Pattern[str]":
    return re.compile(rf"[a-zA-Z0-9]{{{min_length},{max_length}}}")


def is_valid_shortcode(shortcode: str, config: Settings = settings) -> bool:
    """
    Check a custom shortcode against the configured format.

    Only ASCII letters and digits are allowed, which keeps shortcodes
    safe to embed in paths and queries.
    """
    if not shortcode or not isinstance(shortcode, str):
        return False
    pattern = shortcode_pattern(config.SHORTCODE_MIN_LENGTH, config.SHORTCODE_MAX_LENGTH)
    return pattern.fullmatch(shortcode) is not None


def sanitize_short_code(short_code: str, config: Settings = settings) -> Optional[str]:
    """
    Sanitize a shortcode taken from a request path.

    Accepts custom codes (configured bounds) as well as generated ones.

    Returns:
        Stripped short code if well formed, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    short_code = short_code.strip()

    max_length = max(config.SHORTCODE_MAX_LENGTH, config.GENERATED_SHORTCODE_LENGTH)
    if len(short_code) > max_length:
        return None

    if not re.fullmatch(r"[0-9a-zA-Z]+", short_code):
        return None

    return short_code


def collect_entry_errors(
    entry: UrlEntry,
    known_shortcodes: AbstractSet[str],
    config: Settings = settings,
) -> List[EntryFieldError]:
    """
    Collect every field error of an entry.

    Args:
        entry: The entry to check
        known_shortcodes: Shortcodes already taken (registry plus earlier batch entries)
        config: Settings providing the shortcode bounds

    Returns:
        One exception per failing field, empty if the entry is valid
    """
    errors: List[EntryFieldError] = []

    if not is_valid_url(entry.url):
        errors.append(InvalidURLError(entry.url))

    if entry.validity and not is_valid_validity(entry.validity, config):
        errors.append(InvalidValidityError(entry.validity))

    if entry.shortcode:
        if not is_valid_shortcode(entry.shortcode, config):
            errors.append(
                InvalidShortcodeFormatError(
                    entry.shortcode,
                    config.SHORTCODE_MIN_LENGTH,
                    config.SHORTCODE_MAX_LENGTH,
                )
            )
        elif entry.shortcode in known_shortcodes:
            errors.append(DuplicateShortcodeError(entry.shortcode))

    return errors


def errors_to_fields(errors: List[EntryFieldError]) -> FieldErrors:
    return {error.field: error.message for error in errors}


def validate_entry(
    entry: UrlEntry,
    known_shortcodes: AbstractSet[str],
    config: Settings = settings,
) -> FieldErrors:
    """
    Validate an entry and return its field errors.

    Returns:
        Mapping of field name (url, validity, shortcode) to message;
        empty when the entry is valid
    """
    return errors_to_fields(collect_entry_errors(entry, known_shortcodes, config))
