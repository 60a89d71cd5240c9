"""
Bounded retry with linear backoff for unreliable upstream calls.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from transcript_chain.core.constants import MAX_RETRIES, RETRY_BASE_DELAY_SEC
from transcript_chain.core.error_codes import is_retryable_error
from transcript_chain.core.models import RetryState

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(operation: Callable[[], Awaitable[T]],
                     max_retries: int = MAX_RETRIES,
                     base_delay: float = RETRY_BASE_DELAY_SEC,
                     label: str = "operation",
                     retryable: Callable[[BaseException], bool] = is_retryable_error,
                     sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> T:
    """
    Await `operation()` up to max_retries + 1 times.

    After a failure that `retryable` accepts, wait base_delay * (attempt + 1)
    seconds and try again. Non-retryable failures, and the failure of the
    final attempt, are re-raised unchanged.
    """
    if max_retries < 0:
        raise ValueError("max_retries must be >= 0")
    state = RetryState(max_attempts=max_retries + 1)

    for attempt in range(state.max_attempts):
        state.attempt = attempt
        try:
            return await operation()
        except Exception as e:
            state.last_error = e
            if not (state.has_attempts_left and retryable(e)):
                raise

            wait = base_delay * (attempt + 1)
            logger.warning("[%s] retry %d/%d in %.1fs after: %s",
                           label, attempt + 1, max_retries, wait, str(e)[:200])
            await sleep(wait)

    raise state.last_error
