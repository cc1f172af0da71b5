"""Async utilities for running blocking file I/O off the event loop."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Sequence, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Args:
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)

    Example:
        content = await run_sync(path.read_text, encoding="utf-8")
    """
    return await asyncio.to_thread(func, *args, **kwargs)


async def gather_limited(
    coros: Sequence[Coroutine[Any, Any, T]],
    max_parallel: int | None = None,
) -> list[T]:
    """Run coroutines concurrently, at most *max_parallel* at a time.

    Returns results in order. Exceptions propagate from the first failure,
    so callers that must tolerate per-item failures should catch inside
    each coroutine.

    Args:
        coros: Sequence of coroutines to run concurrently.
        max_parallel: Upper bound on in-flight coroutines. ``None`` means
            no bound.

    Returns:
        List of results in the same order as input coroutines.
    """
    if max_parallel is None:
        return list(await asyncio.gather(*coros))

    semaphore = asyncio.Semaphore(max_parallel)

    async def _bounded(coro: Coroutine[Any, Any, T]) -> T:
        async with semaphore:
            return await coro

    return list(await asyncio.gather(*(_bounded(c) for c in coros)))
