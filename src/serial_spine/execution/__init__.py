"""Serial execution -- run async work one item at a time, in submission order.

Example:
    >>> from serial_spine.execution import SerialExecutor
    >>>
    >>> executor = SerialExecutor()
    >>> hello = await executor.submit(fetch_greeting)
    >>> world = await executor.submit(lambda: fetch_name(user_id=1))

Tags:
    serial-spine, execution, executor, asyncio, fifo

Doc-Types:
    api-reference
"""

from .decorators import serialized
from .serial import ExecutorState, ExecutorStats, SerialExecutor

__all__ = [
    "SerialExecutor",
    "ExecutorState",
    "ExecutorStats",
    "serialized",
]
