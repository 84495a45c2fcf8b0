# doc_checker/pacing.py
"""Injectable pacing delays. Production waits; tests pass `no_delay`."""
import asyncio
from typing import Awaitable, Callable

Delay = Callable[[], Awaitable[None]]


def sleep_delay(seconds: float) -> Delay:
    """Pacing delay that suspends the caller for `seconds`."""
    async def _delay():
        await asyncio.sleep(seconds)
    return _delay


async def no_delay():
    return None
