import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from common.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def poll_until(
    probe: Callable[[], Awaitable[T]],
    max_attempts: int,
    interval_ms: int,
    description: str = "condition",
) -> T | None:
    """
    Call an async probe until it returns something truthy, with a fixed pause between attempts.

    Every wait in the quote wizard goes through here so all stages share the same
    bounded retry behaviour. There is no unbounded variant.

    Args:
        probe: Async callable; a truthy return value ends the poll.
        max_attempts: Attempt budget (at least one attempt is always made).
        interval_ms: Pause between attempts in milliseconds.
        description: Used in log messages.

    Returns:
        The first truthy probe result, or None when the budget is exhausted.
    """
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        result = await probe()
        if result:
            if attempt > 1:
                logger.debug(f"{description}: satisfied on attempt {attempt}/{attempts}")
            return result
        if attempt < attempts:
            await asyncio.sleep(interval_ms / 1000)

    logger.debug(f"{description}: not satisfied after {attempts} attempts")
    return None
