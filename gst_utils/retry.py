# gst_utils/retry.py
"""Retry with exponential backoff."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Tuple, Type, TypeVar

from gst_core.errors import RetryableError

log = logging.getLogger("retry")

T = TypeVar("T")


def call_with_backoff(
    func: Callable[..., T],
    *args: Any,
    max_attempts: int = 3,
    backoff_factor: float = 2.0,
    retryable_exceptions: Tuple[Type[BaseException], ...] = (RetryableError,),
    **kwargs: Any,
) -> T:
    """
    Call `func`, retrying on `retryable_exceptions`.
    Waits backoff_factor ** attempt seconds (1, 2, 4, ... for factor 2).
    The last failure is re-raised; other exceptions propagate immediately.
    """
    attempts = max(1, int(max_attempts))
    name = getattr(func, "__name__", repr(func))
    for attempt in range(attempts):
        try:
            return func(*args, **kwargs)
        except retryable_exceptions as e:
            if attempt == attempts - 1:
                log.error("Max retries (%d) exceeded for %s: %s", attempts, name, e)
                raise
            wait_time = backoff_factor**attempt
            log.warning(
                "Retry %d/%d for %s after %.1fs: %s",
                attempt + 1,
                attempts,
                name,
                wait_time,
                e,
            )
            time.sleep(wait_time)
    raise AssertionError("unreachable")
