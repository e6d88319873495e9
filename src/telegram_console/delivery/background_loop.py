"""Private asyncio event loop on a daemon thread.

Synchronous programs have no event loop for the drain coroutine to run on.
The delivery queue starts one of these lazily the first time a record is
enqueued outside a running loop, and submits drains to it thread-safely.
"""

from __future__ import annotations

__all__ = ["BackgroundLoop"]

import asyncio
import concurrent.futures
import threading
from typing import Any, Coroutine, TypeVar

from telegram_console.constants import APP_NAME, BACKGROUND_LOOP_JOIN_TIMEOUT_SECONDS

T = TypeVar("T")


class BackgroundLoop:
    """Event loop running forever on a daemon thread until stop() is called.

    start() is idempotent and thread-safe. After stop() the object can be
    started again with a fresh loop.
    """

    def __init__(self, name: str = f"{APP_NAME}-delivery") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        return self._loop

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> asyncio.AbstractEventLoop:
        """Start the thread if needed and return its loop."""
        with self._lock:
            if self._loop is not None and not self._loop.is_closed():
                return self._loop

            loop = asyncio.new_event_loop()
            thread = threading.Thread(target=self._run, args=(loop,), name=self._name, daemon=True)
            self._loop = loop
            self._thread = thread
            thread.start()
            return loop

    def submit(self, coro: Coroutine[Any, Any, T]) -> concurrent.futures.Future[T]:
        """Schedule a coroutine on the loop from any thread."""
        return asyncio.run_coroutine_threadsafe(coro, self.start())

    def stop(self, timeout: float | None = BACKGROUND_LOOP_JOIN_TIMEOUT_SECONDS) -> None:
        """Stop the loop and join the thread.

        Tasks still pending are cancelled before the loop closes.
        Safe to call when never started.
        """
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None

        if loop is None or thread is None:
            return

        try:
            loop.call_soon_threadsafe(loop.stop)
        except RuntimeError:
            pass  # Loop already closed
        if thread is not threading.current_thread():
            thread.join(timeout)

    @staticmethod
    def _run(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
