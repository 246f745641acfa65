"""
Bounded retry helper.
"""

import logging
import time
from typing import Callable, Tuple, Type, TypeVar


T = TypeVar("T")

logger = logging.getLogger(__name__)


def retry_call(func: Callable[[], T],
               retry_on: Tuple[Type[BaseException], ...],
               attempts: int = 1,
               delay_seconds: float = 2.0,
               description: str = "operation") -> T:
    """
    Call ``func``, retrying up to ``attempts`` more times on ``retry_on``.

    The delay doubles after each failed attempt. The last exception is
    re-raised once the retries are used up.
    """
    delay = delay_seconds
    for attempt in range(attempts + 1):
        try:
            return func()
        except retry_on as e:
            if attempt >= attempts:
                raise
            logger.warning(
                f"{description} failed ({e}); retrying in {delay:.1f}s "
                f"(attempt {attempt + 2}/{attempts + 1})"
            )
            if delay > 0:
                time.sleep(delay)
            delay *= 2
    raise AssertionError("unreachable")
