"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Error handling and HTTP responses
- Delegating to service layer

Endpoints are plain (sync) functions: the services are synchronous and
FastAPI runs them in its threadpool, so a slow log collector never
blocks the event loop.
"""

from typing import Set

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from shortlinks.api.schemas import (
    BatchShortenRequest,
    BatchShortenResponse,
    EntryResultResponse,
    ShortenRequest,
    ShortenResponse,
    StatsResponse,
)
from shortlinks.core.exceptions import (
    BatchSizeError,
    ShortCodeExpiredError,
    ShortCodeNotFoundError,
)
from shortlinks.core.registry_manager import get_log_sink, get_registry
from shortlinks.core.setting import settings
from shortlinks.core.timeutils import iso_z
from shortlinks.core.validators import sanitize_short_code
from shortlinks.services.batch_service import BatchShorteningService
from shortlinks.services.redirect_service import RedirectService
from shortlinks.services.registry import ShortcodeRegistry
from shortlinks.services.stats_service import StatsService


router = APIRouter()

VALIDATION_CODES = {"invalid_url", "invalid_validity", "invalid_shortcode_format"}


async def require_registry() -> ShortcodeRegistry:
    """Dependency returning the registry, or 503 if the app has not started it."""
    registry = await get_registry()
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Shortcode registry is not available"
        )
    return registry


async def get_batch_service(
    registry: ShortcodeRegistry = Depends(require_registry)
) -> BatchShorteningService:
    return BatchShorteningService(registry, log_sink=await get_log_sink(), config=settings)


def status_for_error_codes(codes: Set[str]) -> int:
    """
    Pick the HTTP status for a rejected entry.

    Malformed input wins over conflicts; an exhausted code space is a
    server-side condition.
    """
    if codes & VALIDATION_CODES:
        return status.HTTP_400_BAD_REQUEST
    if "duplicate_shortcode" in codes:
        return status.HTTP_409_CONFLICT
    return status.HTTP_503_SERVICE_UNAVAILABLE


def clean_short_code(short_code: str) -> str:
    sanitized_code = sanitize_short_code(short_code, settings)
    if not sanitized_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid short code format: '{short_code}'. Short codes must contain only alphanumeric characters."
        )
    return sanitized_code


@router.post(
    "/api/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Takes a long URL with optional validity and shortcode and returns the short URL with its expiry"
)
def create_short_url(
    body: ShortenRequest,
    service: BatchShorteningService = Depends(get_batch_service)
) -> ShortenResponse:
    """
    Create a new short URL from a long URL.

    Raises:
        HTTPException 400: If the entry is malformed
        HTTPException 409: If the custom shortcode is already in use
        HTTPException 503: If no free shortcode could be generated
    """
    result = service.submit([body.to_entry()])[0]

    if not result.ok:
        raise HTTPException(
            status_code=status_for_error_codes(set(result.error_codes.values())),
            detail="; ".join(result.errors.values())
        )

    return ShortenResponse(
        shortUrl=result.short_url,
        shortcode=result.shortcode,
        expiry=iso_z(result.expires_at)
    )


@router.post(
    "/api/shorten/batch",
    response_model=BatchShortenResponse,
    summary="Shorten a batch of URLs",
    description="Validates and registers up to five entries; each entry succeeds or fails on its own"
)
def create_short_urls(
    body: BatchShortenRequest,
    service: BatchShorteningService = Depends(get_batch_service)
) -> BatchShortenResponse:
    """
    Process a form submission.

    Raises:
        HTTPException 400: If the batch is empty or has too many entries
    """
    try:
        results = service.submit([item.to_entry() for item in body.entries])
    except BatchSizeError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    registered = sum(1 for result in results if result.ok)
    return BatchShortenResponse(
        results=[EntryResultResponse.from_result(result) for result in results],
        registered=registered,
        rejected=len(results) - registered
    )


@router.get(
    "/api/stats/{short_code}",
    response_model=StatsResponse,
    summary="Get shortcode statistics",
    description="Returns the original URL, creation and expiry times and the recorded clicks"
)
def get_url_stats(
    short_code: str,
    registry: ShortcodeRegistry = Depends(require_registry)
) -> StatsResponse:
    """
    Get statistics for a shortcode.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
    """
    short_code = clean_short_code(short_code)

    stats = StatsService(registry, config=settings).get_stats(short_code)
    if not stats:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{short_code}' not found"
        )

    return StatsResponse(**stats)


@router.get(
    "/{short_code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Takes a short code and redirects to the original long URL"
)
def redirect_to_url(
    short_code: str,
    request: Request,
    registry: ShortcodeRegistry = Depends(require_registry)
) -> RedirectResponse:
    """
    Redirect to the original URL for a given short code.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
        HTTPException 410: If the short code has expired
    """
    short_code = clean_short_code(short_code)

    source = request.headers.get("Referer") or "direct"
    user_agent = request.headers.get("User-Agent", "")

    try:
        original_url = RedirectService(registry).resolve(
            short_code, source=source, user_agent=user_agent
        )
    except ShortCodeNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except ShortCodeExpiredError as e:
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail=str(e)
        )

    return RedirectResponse(
        url=original_url,
        status_code=status.HTTP_302_FOUND
    )
