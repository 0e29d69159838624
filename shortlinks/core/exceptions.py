"""
Custom Exceptions

This module defines custom exceptions for better error handling
and more specific error messages.

Field-level errors (URL, validity, shortcode) carry the name of the
entry field they belong to, a stable machine-readable code and the
message shown next to the offending input. They are per-entry and
never abort processing of sibling entries in a batch.
"""


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class EntryFieldError(URLShortenerException):
    """Base class for errors attached to a single field of an entry."""

    field: str = ""
    code: str = ""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidURLError(EntryFieldError):
    """Raised when URL validation fails."""

    field = "url"
    code = "invalid_url"

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        super().__init__(reason)


class InvalidValidityError(EntryFieldError):
    """Raised when the validity is not a positive whole number of minutes."""

    field = "validity"
    code = "invalid_validity"

    def __init__(self, validity: str):
        self.validity = validity
        super().__init__("Validity must be a positive integer (minutes)")


class InvalidShortcodeFormatError(EntryFieldError):
    """Raised when a custom shortcode does not match the allowed format."""

    field = "shortcode"
    code = "invalid_shortcode_format"

    def __init__(self, shortcode: str, min_length: int, max_length: int):
        self.shortcode = shortcode
        super().__init__(
            f"Shortcode must be {min_length}-{max_length} alphanumeric characters"
        )


class DuplicateShortcodeError(EntryFieldError):
    """Raised when a shortcode is already registered."""

    field = "shortcode"
    code = "duplicate_shortcode"

    def __init__(self, shortcode: str):
        self.shortcode = shortcode
        super().__init__("Shortcode already in use")


class ShortcodeSpaceExhaustedError(EntryFieldError):
    """Raised when no free shortcode was found within the attempt limit."""

    field = "shortcode"
    code = "shortcode_space_exhausted"

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique shortcode after {attempts} attempts"
        )


class BatchSizeError(URLShortenerException):
    """Raised when a batch is empty or holds more entries than allowed."""

    def __init__(self, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        super().__init__(f"A batch must contain between 1 and {max_size} entries, got {size}")


class ShortCodeNotFoundError(URLShortenerException):
    """Raised when a short code is not found in the registry."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class ShortCodeExpiredError(URLShortenerException):
    """Raised when a short code exists but its validity has elapsed."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' has expired")

