"""Retry with exponential backoff for remote calls that may fail or come back empty."""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, Union

from config import RETRY_BASE_DELAY_SECONDS, RETRY_MAX_ATTEMPTS
from utils.errors import RetryExhaustedError
from utils.logger import get_logger

logger = get_logger(__name__)

Operation = Callable[[], Union[Any, Awaitable[Any]]]


async def retry_operation(
    operation: Operation,
    max_retries: int = RETRY_MAX_ATTEMPTS,
    delay: float = RETRY_BASE_DELAY_SECONDS,
    give_up_on: Tuple[Type[BaseException], ...] = (),
) -> Any:
    """
    Run `operation` up to `max_retries` times.
    A None result counts as a failure, same as a raised exception.
    Waits delay * 2**attempt between attempts; no jitter.
    Exceptions listed in `give_up_on` are re-raised at once without further attempts.
    Raises RetryExhaustedError naming the attempt count and the last error.
    """
    if not callable(operation):
        raise TypeError("Operation must be a function")

    last_error: Optional[BaseException] = None
    for attempt in range(max_retries):
        try:
            result = operation()
            if inspect.isawaitable(result):
                result = await result
            if result is None:
                raise ValueError("Operation returned None")
            return result
        except give_up_on:
            raise
        except Exception as e:
            last_error = e
            logger.warning("Retry attempt %s failed: %s", attempt + 1, e)
            if attempt < max_retries - 1:
                await asyncio.sleep(delay * (2 ** attempt))

    raise RetryExhaustedError(max_retries, last_error)
