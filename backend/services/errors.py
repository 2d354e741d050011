"""Typed failures raised by the matching engine.

Every fatal condition surfaces as a subclass of ``EngineError`` so the API
layer can map it to a stable error code. Non-fatal degradations (vector store
fallback, missing enrichment table) are logged and never raised.
"""

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


class EngineError(Exception):
    """Base class for all matching engine failures."""

    code = "MATCHING_FAILED"
    user_message = "Failed to generate recommendations. Please try again."


class ConfigurationError(EngineError):
    """A required external service has no credentials configured."""

    code = "CONFIGURATION_ERROR"
    user_message = "Service not properly configured. Please contact support."


class CatalogValidationError(EngineError):
    """Catalog data is unreadable or a record failed schema checks."""

    code = "CATALOG_UNAVAILABLE"
    user_message = (
        "Career matching system is being initialized. Please try again in a few minutes."
    )


class ResponseParseError(EngineError):
    """The reasoning service response held no single valid JSON array.

    ``raw_response`` is kept for diagnostics only and must never be shown
    to the end user.
    """

    code = "MATCHING_FAILED"

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


class RateLimitedError(EngineError):
    """An external service signalled throttling. Not retried internally."""

    code = "RATE_LIMITED"
    user_message = "Service is temporarily busy. Please try again in a few seconds."

    def __init__(self, service: str, retry_after: int) -> None:
        super().__init__(f"{service} rate limited the request (retry after {retry_after}s)")
        self.service = service
        self.retry_after = retry_after


class ServiceTimeoutError(EngineError):
    """A network call exceeded its budget or was cancelled by the caller."""

    code = "TIMEOUT"
    user_message = "The request took too long. Please try again shortly."

    def __init__(self, service: str, timeout: float, cancelled: bool = False) -> None:
        reason = "was cancelled" if cancelled else f"timed out after {timeout:.1f}s"
        super().__init__(f"{service} call {reason}")
        self.service = service
        self.timeout = timeout
        self.cancelled = cancelled


class UpstreamServiceError(EngineError):
    """The embedding or reasoning service failed for a non-throttling reason."""

    code = "UPSTREAM_ERROR"
    user_message = "An upstream AI service failed. Please try again."

    def __init__(self, service: str, detail: str) -> None:
        super().__init__(f"{service} error: {detail}")
        self.service = service


async def bounded(awaitable: Awaitable[T], service: str, timeout: float) -> T:
    """Await a network call under a deadline.

    Both an overrun and a caller-triggered cancellation surface as
    ``ServiceTimeoutError`` so the request never hangs or leaks a bare
    ``CancelledError`` past the engine boundary.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise ServiceTimeoutError(service, timeout) from e
    except asyncio.CancelledError as e:
        raise ServiceTimeoutError(service, timeout, cancelled=True) from e
