"""Decorator that routes every call of a function through a SerialExecutor.

Example::

    cache_executor = SerialExecutor(name="cache")

    @serialized(cache_executor)
    async def write_entry(key: str, value: bytes) -> None:
        await storage.put(key, value)

    # Concurrent callers still write one at a time, in call order.
    await asyncio.gather(write_entry("a", b"1"), write_entry("b", b"2"))

``@serialized()`` without an executor gives the function its own.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

from serial_spine.execution.serial import SerialExecutor


def serialized(
    executor: SerialExecutor | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator factory submitting each call of the wrapped function to ``executor``.

    Args:
        executor: Executor to submit to. A dedicated one named after the
            function is created when omitted.

    Returns:
        Decorator producing an ``async`` wrapper. The wrapper exposes the
        executor as ``wrapper.executor``.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        target = executor or SerialExecutor(name=func.__qualname__)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            return await target.submit(functools.partial(func, *args, **kwargs))

        wrapper.executor = target  # type: ignore[attr-defined]
        return wrapper

    return decorator


__all__ = ["serialized"]
