"""Serial Executor — strict one-at-a-time asyncio execution.

WHY
───
Plain ``asyncio`` interleaves coroutines at every ``await``: if two
callers write to the same cache and the first one awaits I/O halfway
through, the second one runs in the gap.  ``SerialExecutor`` removes
that gap.  Work items run one after another in submission order, and
the next item does not start until the current one has finished,
*including* every suspension it performs along the way.

ARCHITECTURE
────────────
::

    SerialExecutor()
      ├── .submit(work)      ─ enqueue + await outcome
      ├── .wait_idle()       ─ await empty backlog
      ├── .state / .pending  ─ IDLE | DRAINING, backlog size
      └── .stats             ─ ExecutorStats counters

    submit(work)
      │  append _PendingEntry(work, future)      ┐ no await in between:
      │  if not draining: start drain task       ┘ atomic on the loop
      └─ await future

    _drain()  (single asyncio.Task, started lazily)
      while backlog:
          entry = backlog.popleft()
          await entry (runs in the submitter's contextvars)
          future.set_result / future.set_exception
      draining = False      ─ same synchronous step as the empty check

    State machine:  IDLE ──submit──▶ DRAINING ──backlog empty──▶ IDLE

BEST PRACTICES
──────────────
- One executor per resource that needs ordered access (a cache file,
  a connection that does not tolerate interleaving, a wizard flow).
- Never ``await executor.submit(...)`` from inside a work item running
  on the *same* executor: the inner item queues behind the outer one,
  which is waiting for it.
- Errors raised by work are re-raised to their own caller as the same
  exception object; they never reach other callers.

Related modules:
    decorators.py  — ``@serialized`` wraps a function around ``submit``

Example::

    executor = SerialExecutor()

    notes = await executor.submit(lambda: notes_service.fetch_notes())
    await executor.submit(lambda: notes_service.update(notes[0].id, "Updated"))
"""

from __future__ import annotations

import asyncio
import contextvars
import inspect
import itertools
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from serial_spine.core.errors import ExecutorLoopError, InvalidWorkError
from serial_spine.core.logging import get_logger
from serial_spine.core.settings import get_settings

logger = get_logger(__name__)

T = TypeVar("T")


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(UTC)


class ExecutorState(str, Enum):
    """Serial executor states."""

    IDLE = "idle"          # No drain loop running
    DRAINING = "draining"  # Drain loop consuming the backlog


@dataclass
class ExecutorStats:
    """Counters for monitoring a serial executor.

    Every submission ends up in exactly one of ``completed``, ``failed``
    or ``cancelled``; until then it is counted by ``in_flight``.
    """

    submitted: int = 0
    completed: int = 0
    failed: int = 0
    cancelled: int = 0
    drain_cycles: int = 0
    last_submitted_at: datetime | None = None
    last_completed_at: datetime | None = None

    @property
    def in_flight(self) -> int:
        """Submissions whose outcome has not been delivered yet."""
        return self.submitted - self.completed - self.failed - self.cancelled


@dataclass
class _PendingEntry(Generic[T]):
    """A work item paired with the future its caller is awaiting."""

    seq: int
    work: Callable[[], Awaitable[T] | T]
    future: asyncio.Future[T]
    context: contextvars.Context = field(default_factory=contextvars.copy_context)

    async def run(self) -> T:
        result = self.work()
        if inspect.isawaitable(result):
            return await result
        return result


class SerialExecutor:
    """Runs submitted work items one at a time, in submission order.

    The executor owns an explicit backlog: the order of ``submit`` calls
    *is* the execution order, and a work item that suspends keeps every
    later item waiting until it has produced its outcome.

    Parameters
    ----------
    name : str
        Label bound to every log event of this executor.
    """

    def __init__(self, name: str = "serial") -> None:
        self.name = name
        self._backlog: deque[_PendingEntry[Any]] = deque()
        self._draining = False
        self._drain_task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._idle_waiters: list[asyncio.Future[None]] = []
        self._seq = itertools.count(1)
        self._stats = ExecutorStats()
        self._slow_work_seconds = get_settings().slow_work_seconds

    # ── Introspection ────────────────────────────────────────────────

    @property
    def state(self) -> ExecutorState:
        """Current executor state."""
        return ExecutorState.DRAINING if self._draining else ExecutorState.IDLE

    @property
    def is_draining(self) -> bool:
        """True while a drain loop is active."""
        return self._draining

    @property
    def pending(self) -> int:
        """Entries waiting in the backlog (the executing one excluded)."""
        return len(self._backlog)

    @property
    def stats(self) -> ExecutorStats:
        """Get executor statistics."""
        return self._stats

    def __len__(self) -> int:
        return len(self._backlog)

    def __repr__(self) -> str:
        return (
            f"SerialExecutor(name={self.name!r}, state={self.state.value}, "
            f"pending={self.pending})"
        )

    # ── Submission ───────────────────────────────────────────────────

    async def submit(self, work: Callable[[], Awaitable[T] | T]) -> T:
        """Run ``work`` after everything submitted before it, and return its result.

        Args:
            work: Zero-argument callable. Usually an ``async def`` function
                or a lambda returning a coroutine; a plain callable's return
                value is used as-is.

        Returns:
            The value produced by ``work``.

        Raises:
            InvalidWorkError: If ``work`` is not callable.
            ExecutorLoopError: If the executor is draining on another loop.
            Exception: Whatever ``work`` raised, unchanged.
        """
        if not callable(work):
            raise InvalidWorkError(
                f"work must be a zero-argument callable, got {type(work).__name__}"
            ).with_context(executor=self.name)

        loop = asyncio.get_running_loop()
        if self._draining and self._loop is not loop:
            raise ExecutorLoopError(
                "executor is draining on a different event loop"
            ).with_context(executor=self.name)

        future: asyncio.Future[T] = loop.create_future()
        entry = _PendingEntry(seq=next(self._seq), work=work, future=future)
        self._backlog.append(entry)
        self._stats.submitted += 1
        self._stats.last_submitted_at = utcnow()
        logger.debug(
            "serial_executor.submitted",
            executor=self.name,
            seq=entry.seq,
            pending=len(self._backlog),
        )

        if not self._draining:
            self._start_drain(loop)

        return await future

    async def wait_idle(self, timeout: float | None = None) -> bool:
        """Wait until the backlog is empty and no drain loop is running.

        Args:
            timeout: Seconds to wait (``None`` = forever).

        Returns:
            ``True`` once idle, ``False`` if the timeout expired first.
        """
        if not self._draining and not self._backlog:
            return True

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._idle_waiters.append(waiter)
        try:
            await asyncio.wait_for(waiter, timeout=timeout)
        except TimeoutError:
            return False
        finally:
            if waiter in self._idle_waiters:
                self._idle_waiters.remove(waiter)
        return True

    # ── Drain loop ───────────────────────────────────────────────────

    def _start_drain(self, loop: asyncio.AbstractEventLoop) -> None:
        self._draining = True
        self._loop = loop
        self._stats.drain_cycles += 1
        # Drain bookkeeping runs outside every submitter's contextvars.
        self._drain_task = loop.create_task(
            self._drain(),
            name=f"serial-executor-drain:{self.name}",
            context=contextvars.Context(),
        )
        self._drain_task.add_done_callback(self._on_drain_done)

    def _on_drain_done(self, task: asyncio.Task[None]) -> None:
        if self._drain_task is task:
            # Cancelled before its first step: the drain body never ran.
            self._draining = False
            self._drain_task = None
            self._loop = None

    async def _drain(self) -> None:
        logger.debug(
            "serial_executor.drain_started",
            executor=self.name,
            cycle=self._stats.drain_cycles,
            pending=len(self._backlog),
        )
        try:
            while self._backlog:
                entry = self._backlog.popleft()
                await self._execute(entry)
        finally:
            self._draining = False
            self._drain_task = None
            self._loop = None
            logger.debug(
                "serial_executor.drain_finished",
                executor=self.name,
                cycle=self._stats.drain_cycles,
                pending=len(self._backlog),
            )
            if not self._backlog:
                self._wake_idle_waiters()

    async def _execute(self, entry: _PendingEntry[Any]) -> None:
        """Run one entry to completion and deliver its outcome."""
        loop = asyncio.get_running_loop()
        runner = loop.create_task(entry.run(), context=entry.context)
        started = time.perf_counter()
        try:
            result = await runner
        except asyncio.CancelledError:
            drain_task = asyncio.current_task()
            if drain_task is not None and drain_task.cancelling():
                # Drain loop itself is being torn down.
                self._settle_cancelled(entry, reason="drain_cancelled")
                raise
            self._settle_cancelled(entry, reason="work_cancelled")
        except Exception as exc:
            self._settle_failure(entry, exc)
        else:
            self._settle_success(entry, result)
        self._check_slow(entry, time.perf_counter() - started)

    # ── Result delivery ──────────────────────────────────────────────

    def _settle_success(self, entry: _PendingEntry[Any], result: Any) -> None:
        if entry.future.done():
            self._record_abandoned(entry)
            return
        entry.future.set_result(result)
        self._stats.completed += 1
        self._stats.last_completed_at = utcnow()
        logger.debug("serial_executor.completed", executor=self.name, seq=entry.seq)

    def _settle_failure(self, entry: _PendingEntry[Any], exc: Exception) -> None:
        if entry.future.done():
            self._record_abandoned(entry)
            return
        entry.future.set_exception(exc)
        self._stats.failed += 1
        self._stats.last_completed_at = utcnow()
        logger.warning(
            "serial_executor.work_failed",
            executor=self.name,
            seq=entry.seq,
            error_type=type(exc).__name__,
            error=str(exc),
        )

    def _settle_cancelled(self, entry: _PendingEntry[Any], reason: str) -> None:
        if entry.future.done():
            self._record_abandoned(entry)
            return
        entry.future.cancel()
        self._stats.cancelled += 1
        logger.info(
            "serial_executor.cancelled",
            executor=self.name,
            seq=entry.seq,
            reason=reason,
        )

    def _record_abandoned(self, entry: _PendingEntry[Any]) -> None:
        # Caller stopped waiting; outcome is discarded.
        self._stats.cancelled += 1
        logger.debug("serial_executor.abandoned", executor=self.name, seq=entry.seq)

    def _check_slow(self, entry: _PendingEntry[Any], duration: float) -> None:
        if self._slow_work_seconds is not None and duration > self._slow_work_seconds:
            logger.warning(
                "serial_executor.slow_work",
                executor=self.name,
                seq=entry.seq,
                duration_ms=round(duration * 1000, 2),
                threshold_ms=round(self._slow_work_seconds * 1000, 2),
            )

    def _wake_idle_waiters(self) -> None:
        waiters, self._idle_waiters = self._idle_waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)


__all__ = [
    "ExecutorState",
    "ExecutorStats",
    "SerialExecutor",
]
