"""Retry with exponential backoff for remote operations."""

import time
import logging
from typing import Callable, TypeVar

from tenacity import Retrying, before_sleep_log, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_with_backoff(
    func: Callable[[], T],
    attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep
) -> T:
    """
    Call ``func`` until it succeeds or ``attempts`` tries are used up.

    Every exception is retried the same way, waiting ``base_delay`` seconds
    after the first failure and doubling each time. After the final attempt
    the last exception propagates unchanged.

    Args:
        func: Zero-argument callable performing one remote operation
        attempts: Total number of tries
        base_delay: Seconds to wait after the first failure
        sleep: Sleep function (injectable for tests)

    Returns:
        The result of the first successful call
    """
    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=base_delay),
        sleep=sleep,
        reraise=True,
        before_sleep=before_sleep_log(logger, logging.DEBUG),
    )
    return retrying(func)
