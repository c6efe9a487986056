import asyncio
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from cashcast.exceptions import EconomicDataError

T = TypeVar("T", bound=Callable[..., Any])
logger = logging.getLogger(__name__)


def retry(
    retries: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple[type[Exception], ...] = (EconomicDataError,),
) -> Callable[[T], T]:
    """Decorator to retry an async fetch on specified exceptions, with exponential backoff."""

    def decorator(func: T) -> T:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            wait = delay
            for attempt in range(1, retries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == retries:
                        raise
                    logger.warning("Retrying %s due to %s: attempt %d/%d", func.__name__, str(e), attempt, retries)
                    await asyncio.sleep(wait)
                    wait *= backoff

        return wrapper  # type: ignore

    return decorator
