"""
Bounded retry for fetch-modify-write cycles against the key document.

Each attempt must re-read the document: a conflict means the revision
it loaded is stale.
"""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from access_keys.ports.document_store import StoreConflictError
from core.domain.exceptions import KeyStoreConflictError
from core.metrics import store_conflicts_total

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_conflict_retry(
    operation: str,
    attempt: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    backoff_seconds: float = 0.1,
) -> T:
    """
    Run an attempt until it completes without a revision conflict.

    Args:
        operation: Operation name for logs and metrics
        attempt: Coroutine factory performing one full fetch-modify-write
        max_attempts: Upper bound on attempts (at least 1)
        backoff_seconds: Base delay, doubled after each conflict

    Returns:
        Result of the first attempt that did not conflict

    Raises:
        KeyStoreConflictError: If every attempt conflicted
    """
    max_attempts = max(1, max_attempts)
    for attempt_number in range(1, max_attempts + 1):
        try:
            return await attempt()
        except StoreConflictError as e:
            store_conflicts_total.labels(operation=operation).inc()
            if attempt_number == max_attempts:
                logger.error(
                    "%s gave up after %d conflicting attempt(s): %s",
                    operation,
                    attempt_number,
                    e,
                )
                raise KeyStoreConflictError() from e

            delay = backoff_seconds * (2 ** (attempt_number - 1))
            logger.warning(
                "%s hit a revision conflict, retrying in %.2fs (attempt %d/%d)",
                operation,
                delay,
                attempt_number + 1,
                max_attempts,
            )
            if delay > 0:
                await asyncio.sleep(delay)
    raise AssertionError("unreachable")
