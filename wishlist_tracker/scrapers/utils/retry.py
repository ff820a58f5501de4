"""Retry policy with exponential backoff for page fetches."""

from typing import Optional

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from wishlist_tracker.core.exceptions import ScrapeTimeoutError, WishlistTrackerError

logger = structlog.get_logger(__name__)


def is_retryable(exc: BaseException) -> bool:
    """Transient failures (5xx, connection errors) are retried; timeouts are not."""
    if isinstance(exc, ScrapeTimeoutError):
        return False
    return isinstance(exc, WishlistTrackerError) and exc.retryable


def _log_before_sleep(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "fetch_retrying",
        attempt=retry_state.attempt_number,
        wait_seconds=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
        error=str(exc),
        error_code=getattr(exc, "code", None),
    )


def build_scrape_retrying(attempts: int, wait: Optional[wait_base] = None) -> AsyncRetrying:
    """Build an async retry controller for one page fetch.

    Args:
        attempts: Total attempts including the first (values below 1 mean 1)
        wait: Backoff strategy (defaults to exponential 2s..30s)

    Returns:
        AsyncRetrying that re-raises the last error once attempts are exhausted
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait or wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_before_sleep,
        reraise=True,
    )
