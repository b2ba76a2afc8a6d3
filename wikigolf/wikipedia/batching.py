"""
Bounded-concurrency wave scheduling.

Work is split into waves of at most K tasks. A wave runs concurrently on a
thread pool and completes entirely before the next wave starts; results come
back in submission order regardless of completion order.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive lists of at most ``size`` elements."""
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


@dataclass
class Outcome(Generic[T, R]):
    """
    Result of one task: either a value or the error it raised.

    Attributes:
        item: The input the task was run on
        value: Return value (None if the task failed)
        error: Exception raised by the task, if any
    """

    item: T
    value: R | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BoundedPool:
    """
    Runs tasks in waves of at most ``max_concurrent``, pausing between waves.

    A failing task never aborts its siblings; its error is reported in the
    corresponding Outcome.
    """

    def __init__(
        self,
        max_concurrent: int,
        wave_delay: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the pool.

        Args:
            max_concurrent: Maximum tasks in flight at once
            wave_delay: Seconds to wait before every wave but the first
            sleep: Sleep function (injected in tests)
        """
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self._max_concurrent = max_concurrent
        self._wave_delay = wave_delay
        self._sleep = sleep

    def waves(
        self,
        func: Callable[[T], R],
        items: Sequence[T],
    ) -> Iterator[list[Outcome[T, R]]]:
        """
        Yield the ordered outcomes of each wave as it completes.

        The next wave is only started when the consumer asks for it, so a
        caller that stops iterating early issues no further work.
        """
        with ThreadPoolExecutor(max_workers=self._max_concurrent) as executor:
            for index, wave in enumerate(chunk(items, self._max_concurrent)):
                if index > 0 and self._wave_delay > 0:
                    self._sleep(self._wave_delay)

                futures = [executor.submit(func, item) for item in wave]
                outcomes: list[Outcome[T, R]] = []
                for item, future in zip(wave, futures):
                    try:
                        outcomes.append(Outcome(item=item, value=future.result()))
                    except Exception as e:
                        outcomes.append(Outcome(item=item, error=e))

                logger.debug(
                    f"Wave {index + 1}: {len(wave)} tasks, "
                    f"{sum(1 for o in outcomes if not o.ok)} failed"
                )
                yield outcomes
