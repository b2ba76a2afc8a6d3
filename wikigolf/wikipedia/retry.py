"""
Retry with capped exponential backoff for Wikipedia API calls.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from wikigolf.errors import TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """
    Retries transport failures with exponential backoff.

    Attempt n (0-indexed) that fails waits ``base_delay * 2**n`` seconds,
    capped at ``max_delay``, before the next one. Only the exception types in
    ``retry_on`` are retried; anything else propagates immediately.

    Attributes:
        max_attempts: Total attempts including the first one
        base_delay: Delay after the first failure, in seconds
        max_delay: Upper bound for a single delay
        retry_on: Exception types considered transient
        sleep: Sleep function (injected in tests)
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 8.0
    retry_on: tuple[type[BaseException], ...] = (TransportError,)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def delay_for(self, attempt: int) -> float:
        """Backoff before retrying after the given failed attempt."""
        return min(self.base_delay * (2**attempt), self.max_delay)

    def call(self, func: Callable[[], T], description: str = "request") -> T:
        """
        Call ``func`` until it succeeds or attempts are exhausted.

        Raises:
            The last retriable error once all attempts failed, or any
            non-retriable error as soon as it occurs.
        """
        for attempt in range(self.max_attempts):
            try:
                return func()
            except self.retry_on as e:
                if attempt == self.max_attempts - 1:
                    raise
                wait_time = self.delay_for(attempt)
                logger.debug(
                    f"{description} failed ({e}), waiting {wait_time}s "
                    f"before retry {attempt + 1}/{self.max_attempts - 1}"
                )
                self.sleep(wait_time)

        raise AssertionError("unreachable")
