"""Run crawler coroutines from synchronous Celery tasks.

``safe_async_run`` gives each call its own event loop. When the caller is
already inside a running loop, the coroutine runs on a worker thread instead,
since a loop cannot be re-entered.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Awaitable, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar('T')


class AsyncExecutionError(Exception):
    """Raised when a coroutine fails and the caller supplied no fallback."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)


def is_event_loop_running() -> bool:
    try:
        return asyncio.get_running_loop().is_running()
    except RuntimeError:
        return False


def safe_async_run(
    coro: Awaitable[T],
    timeout: Optional[float] = None,
    fallback_result: Optional[T] = None,
    correlation_id: str = "unknown"
) -> T:
    """Run ``coro`` to completion and return its result.

    Args:
        coro: Coroutine to execute
        timeout: Optional limit in seconds
        fallback_result: Returned instead of raising when the coroutine fails
        correlation_id: Included in failure logs

    Raises:
        AsyncExecutionError: If execution fails and no fallback was given
    """
    try:
        if is_event_loop_running():
            with ThreadPoolExecutor(max_workers=1) as executor:
                return executor.submit(asyncio.run, _bounded(coro, timeout)).result()
        return asyncio.run(_bounded(coro, timeout))

    except Exception as e:
        logger.error(
            "Async execution failed",
            correlation_id=correlation_id,
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True
        )

        if fallback_result is not None:
            logger.warning(
                "Using fallback result due to execution failure",
                correlation_id=correlation_id,
                fallback_result=fallback_result
            )
            return fallback_result

        raise AsyncExecutionError(
            f"Safe async execution failed: {str(e)}",
            original_error=e
        )


async def _bounded(coro: Awaitable[T], timeout: Optional[float]) -> T:
    if timeout:
        return await asyncio.wait_for(coro, timeout=timeout)
    return await coro


__all__ = [
    'AsyncExecutionError',
    'safe_async_run',
    'is_event_loop_running',
]
