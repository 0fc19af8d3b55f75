"""Worker pool delivering received callbacks to the user handler.

The callback endpoint acknowledges every message before the handler runs:
messages are put on a bounded queue and drained by a fixed set of worker
threads. Handlers may run concurrently, so no ordering is guaranteed between
messages, and handler failures are only logged.
"""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Callable
from typing import Any, Protocol

from ..api.models import ReceivedMessage
from ..core.logger import get_logger

logger = get_logger("callback.dispatcher")

MessageHandler = Callable[[ReceivedMessage], Any]


class Receiver(Protocol):
    """Object-style handler, for callers that prefer a ``receive`` method."""

    def receive(self, message: ReceivedMessage) -> Any: ...


def as_handler(handler: MessageHandler | Receiver) -> MessageHandler:
    """Normalize a callable or a ``Receiver`` object into a callable."""
    if callable(handler):
        return handler
    receive = getattr(handler, "receive", None)
    if callable(receive):
        return receive
    raise TypeError(f"Handler must be callable or define receive(): {handler!r}")


_STOP = object()


class CallbackDispatcher:
    """Bounded queue drained by worker threads calling a handler."""

    def __init__(
        self,
        handler: MessageHandler | Receiver,
        workers: int = 4,
        queue_size: int = 1000,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            handler: Called once per received message.
            workers: Number of worker threads.
            queue_size: Maximum messages waiting for a worker.
        """
        if workers < 1:
            raise ValueError("workers must be at least 1")
        if queue_size < 1:
            raise ValueError("queue_size must be at least 1")

        self._handler = as_handler(handler)
        self._workers = workers
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=queue_size)
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._stats_lock = threading.Lock()

        self._stats = {
            "total_submitted": 0,
            "total_handled": 0,
            "total_failed": 0,
            "total_dropped": 0,
        }

    @property
    def is_running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def start(self) -> None:
        """Start the worker threads. Calling it again is a no-op."""
        with self._lock:
            if self._threads:
                return
            for index in range(self._workers):
                thread = threading.Thread(
                    target=self._run,
                    name=f"youdu-callback-worker-{index}",
                    daemon=True,
                )
                thread.start()
                self._threads.append(thread)
        logger.debug("Callback dispatcher started with %d workers", self._workers)

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the workers after the messages already queued are handled.

        Waits at most ``timeout`` seconds in total. Workers still busy after
        that are left running as daemon threads.
        """
        with self._lock:
            threads, self._threads = self._threads, []
        if not threads:
            return

        deadline = time.monotonic() + timeout
        for _ in threads:
            try:
                self._queue.put(_STOP, timeout=max(deadline - time.monotonic(), 0))
            except queue.Full:
                logger.warning("Callback queue still full, abandoning busy workers")
                break
        for thread in threads:
            thread.join(timeout=max(deadline - time.monotonic(), 0))

        alive = sum(thread.is_alive() for thread in threads)
        if alive:
            logger.warning("%d callback worker(s) did not stop within %.1fs", alive, timeout)
        else:
            logger.debug("Callback dispatcher stopped")

    def submit(self, message: ReceivedMessage) -> bool:
        """Queue a message for the handler without blocking.

        Returns:
            False if the queue is full and the message was dropped.
        """
        self.start()
        try:
            self._queue.put_nowait(message)
        except queue.Full:
            self._count("total_dropped")
            logger.warning("Callback queue full, dropping package %s", message.package_id)
            return False
        self._count("total_submitted")
        return True

    def join(self) -> None:
        """Block until every queued message has been handled."""
        self._queue.join()

    def get_stats(self) -> dict[str, int]:
        with self._stats_lock:
            stats = dict(self._stats)
        stats["current_size"] = self._queue.qsize()
        return stats

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self._stats[key] += 1

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._handle(item)
            finally:
                self._queue.task_done()

    def _handle(self, message: ReceivedMessage) -> None:
        try:
            self._handler(message)
        except Exception as exc:
            self._count("total_failed")
            logger.error(
                "Callback handler failed for package %s: %s",
                message.package_id,
                exc,
                exc_info=True,
            )
        else:
            self._count("total_handled")
