"""
Serial Spine - strictly ordered execution of async work.

- serial_spine.execution: SerialExecutor and the @serialized decorator
- serial_spine.core: logging, settings, and errors
"""

__version__ = "0.1.0"

from serial_spine.core.errors import (
    ExecutorLoopError,
    InvalidWorkError,
    SerialSpineError,
)
from serial_spine.execution import (
    ExecutorState,
    ExecutorStats,
    SerialExecutor,
    serialized,
)

__all__ = [
    "SerialExecutor",
    "ExecutorState",
    "ExecutorStats",
    "serialized",
    "SerialSpineError",
    "InvalidWorkError",
    "ExecutorLoopError",
]
