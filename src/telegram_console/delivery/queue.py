"""Delivery queue: ordered, single-flight hand-off of records to a transport.

State machine:
    Idle      no drain running (queue may be non-empty only between an
              enqueue and the drain it schedules)
    Draining  exactly one drain coroutine owns the head of the queue

enqueue() appends under a lock and, when Idle, switches to Draining and
schedules one drain. The drain peeks the head, awaits transport.deliver(),
then pops the head whether delivery succeeded or failed, until the queue is
empty. The emptiness check and the switch back to Idle happen under the same
lock, so a concurrent enqueue is either picked up by the running drain or
starts the next one. Never two at once.

Scheduling:
- enqueue() from inside a running event loop: drain is a task on that loop
- enqueue() from plain threads: drain runs on the queue's bound loop, or on
  a BackgroundLoop started on first use

The queue is unbounded. A transport call that never returns stalls all
later records.
"""

from __future__ import annotations

__all__ = [
    "DeliveryQueue",
    "QueueStats",
]

import asyncio
import concurrent.futures
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Coroutine, Union

from telegram_console.delivery.background_loop import BackgroundLoop
from telegram_console.telemetry.system_logger import get_system_logger

if TYPE_CHECKING:
    from telegram_console.delivery.transport import Transport
    from telegram_console.models import LogRecord

DrainFuture = Union["asyncio.Future[None]", "concurrent.futures.Future[None]"]

# Poll interval when waiting on a drain task owned by another thread's loop
_FOREIGN_LOOP_POLL_SECONDS = 0.01


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


@dataclass(slots=True)
class QueueStats:
    """Counters for one queue.

    Attributes:
        enqueued: Records accepted by enqueue().
        delivered: Records the transport accepted.
        failed: Records whose delivery raised (discarded, never retried).
    """

    enqueued: int = 0
    delivered: int = 0
    failed: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "enqueued": self.enqueued,
            "delivered": self.delivered,
            "failed": self.failed,
        }


class DeliveryQueue:
    """FIFO buffer of LogRecords drained one at a time into a Transport.

    Thread-safe for any number of producers. Only the drain coroutine
    awaits; enqueue() never blocks on delivery.

    Usage:
        queue = DeliveryQueue(transport)
        queue.enqueue(record)        # returns immediately
        await queue.flush()          # wait until delivered (or failed)
    """

    def __init__(
        self,
        transport: "Transport",
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            transport: Receives each record exactly once, in order.
            loop: Event loop to drain on. If None, the loop running at the
                first enqueue is used, or a background loop when there is none.
            logger: Diagnostic logger for delivery failures
                (default: system logger).
        """
        self._transport = transport
        self._pending: deque["LogRecord"] = deque()
        # Guards _pending, _draining, _drain_future and _generation
        self._lock = threading.Lock()
        self._draining = False
        self._drain_future: DrainFuture | None = None
        # Incremented per scheduled drain; only the current drain may mutate state
        self._generation = 0

        self._loop = loop
        self._explicit_loop = loop is not None
        self._background: BackgroundLoop | None = None

        self._logger = logger or get_system_logger()
        self._stats = QueueStats()

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def pending(self) -> int:
        """Number of records not yet handed off (including the one in flight)."""
        with self._lock:
            return len(self._pending)

    @property
    def is_draining(self) -> bool:
        with self._lock:
            return self._draining and not self._drain_abandoned()

    @property
    def stats(self) -> QueueStats:
        return self._stats

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        """Loop the drain is bound to (None until the first enqueue)."""
        return self._loop

    @property
    def uses_background_loop(self) -> bool:
        return self._background is not None and self._loop is self._background.loop

    # -------------------------------------------------------------------------
    # Producer side
    # -------------------------------------------------------------------------

    def enqueue(self, record: "LogRecord") -> None:
        """Append a record and start draining if idle.

        Never waits for delivery.
        """
        with self._lock:
            self._pending.append(record)
            self._stats.enqueued += 1

            if self._draining and not self._drain_abandoned():
                return

            self._draining = True
            self._generation += 1
            try:
                self._drain_future = self._schedule_drain(self._generation)
            except BaseException:
                self._draining = False
                raise

    def _drain_abandoned(self) -> bool:
        """True when the drain task's loop was closed before it finished.

        Happens when a loop is closed without cancelling its tasks while
        records are still queued. The next enqueue starts a fresh drain.
        Caller holds the lock.
        """
        future = self._drain_future
        if future is None or not isinstance(future, asyncio.Future):
            return False
        return not future.done() and future.get_loop().is_closed()

    def _schedule_drain(self, generation: int) -> DrainFuture:
        running = _running_loop()
        loop = self._resolve_loop(running)
        if loop is running:
            return loop.create_task(self._drain(generation), name="telegram-console-drain")
        return asyncio.run_coroutine_threadsafe(self._drain(generation), loop)

    def _resolve_loop(self, running: asyncio.AbstractEventLoop | None) -> asyncio.AbstractEventLoop:
        loop = self._loop
        if loop is not None and not loop.is_closed():
            if self._explicit_loop or self.uses_background_loop or loop.is_running():
                return loop

        if running is not None:
            self._loop = running
            self._explicit_loop = False
            return running

        if self._background is None:
            self._background = BackgroundLoop()
        self._loop = self._background.start()
        self._explicit_loop = False
        return self._loop

    # -------------------------------------------------------------------------
    # Drain loop
    # -------------------------------------------------------------------------

    async def _drain(self, generation: int) -> None:
        try:
            while True:
                with self._lock:
                    if generation != self._generation:
                        return  # Superseded after its loop was closed
                    if not self._pending:
                        self._draining = False
                        return
                    record = self._pending[0]

                try:
                    await self._transport.deliver(record)
                except Exception as e:
                    self._stats.failed += 1
                    self._report_failure(record, e)
                else:
                    self._stats.delivered += 1
                finally:
                    # Pop after the call returns, success or not: no retries
                    with self._lock:
                        if generation == self._generation and self._pending and self._pending[0] is record:
                            self._pending.popleft()
        except BaseException:
            # Cancelled, or deliver() raised SystemExit and the like: back to Idle
            with self._lock:
                if generation == self._generation:
                    self._draining = False
            raise

    def _report_failure(self, record: "LogRecord", exc: Exception) -> None:
        self._logger.warning(
            {
                "event": "delivery_failed",
                "message": f"Failed to deliver {record.level.value} log from {record.timestamp}: {exc}",
                "level": record.level.value,
                "timestamp": record.timestamp,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
                "status_code": getattr(exc, "status_code", None),
            }
        )

    # -------------------------------------------------------------------------
    # Waiting and shutdown
    # -------------------------------------------------------------------------

    def _current_drain(self) -> DrainFuture | None:
        with self._lock:
            if not self._draining or self._drain_abandoned():
                return None
            return self._drain_future

    async def flush(self, timeout: float | None = None) -> bool:
        """Wait until the queue is idle.

        Args:
            timeout: Maximum seconds to wait (None waits forever).

        Returns:
            True if the queue became idle, False on timeout.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while True:
            future = self._current_drain()
            if future is None:
                return True

            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                return False

            if isinstance(future, concurrent.futures.Future):
                await asyncio.wait({asyncio.wrap_future(future)}, timeout=remaining)
            elif future.get_loop() is loop:
                await asyncio.wait({future}, timeout=remaining)
            else:
                poll = _FOREIGN_LOOP_POLL_SECONDS
                await asyncio.sleep(poll if remaining is None else min(poll, remaining))

    def flush_sync(self, timeout: float | None = None) -> bool:
        """Blocking variant of flush() for code without an event loop.

        Returns:
            True if the queue became idle, False on timeout.

        Raises:
            RuntimeError: If the drain runs as a task on the calling thread's
                own event loop (blocking would deadlock; await flush()).
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            future = self._current_drain()
            if future is None:
                return True

            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                return False

            if isinstance(future, concurrent.futures.Future):
                concurrent.futures.wait([future], timeout=remaining)
            elif future.get_loop() is _running_loop():
                raise RuntimeError("flush_sync() called from the loop that drains this queue; use await flush()")
            else:
                poll = _FOREIGN_LOOP_POLL_SECONDS
                time.sleep(poll if remaining is None else min(poll, remaining))

    def submit_to_loop(self, coro: Coroutine[Any, Any, Any]) -> "concurrent.futures.Future[Any]":
        """Schedule a coroutine on the background loop from any thread.

        Used to close loop-bound resources (the transport's HTTP client)
        on the loop that created them.

        Raises:
            RuntimeError: If this queue never started a background loop.
        """
        if not self.uses_background_loop or self._background is None:
            coro.close()
            raise RuntimeError("Queue has no background loop")
        return self._background.submit(coro)

    def close(self) -> None:
        """Stop the background loop, if one was started.

        Records still pending are dropped. Call flush() first to deliver them.
        """
        background = self._background
        self._background = None
        if background is not None:
            if self._loop is background.loop:
                self._loop = None
            background.stop()
