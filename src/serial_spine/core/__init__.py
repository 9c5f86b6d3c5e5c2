"""Serial Spine Core -- ambient primitives shared by the execution layer.

Architecture::

    errors.py     Error hierarchy (SerialSpineError, InvalidWorkError, ...)
    logging.py    structlog configuration and get_logger
    settings.py   SerialSpineSettings (pydantic-settings)
"""

from serial_spine.core.errors import (
    ErrorCategory,
    ExecutorLoopError,
    InvalidWorkError,
    SerialSpineError,
)
from serial_spine.core.logging import LogContext, configure_logging, get_logger
from serial_spine.core.settings import SerialSpineSettings, get_settings

__all__ = [
    "ErrorCategory",
    "ExecutorLoopError",
    "InvalidWorkError",
    "SerialSpineError",
    "LogContext",
    "configure_logging",
    "get_logger",
    "SerialSpineSettings",
    "get_settings",
]
