from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from loguru import logger

__all__ = ["BackgroundWorker", "StageChannel", "StageResult"]

T = TypeVar("T")


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """The single message a background stage delivers on its channel."""

    stage: str
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return "" if self.error is None else str(self.error) or type(self.error).__name__


class StageChannel(Generic[T]):
    """Single-producer/single-consumer channel written to exactly once."""

    def __init__(self, stage: str) -> None:
        self.stage = stage
        self._queue: queue.SimpleQueue[StageResult[T]] = queue.SimpleQueue()
        self._delivered = False

    def send(self, result: StageResult[T]) -> None:
        if self._delivered:
            raise RuntimeError(f"Stage {self.stage} already delivered a result")
        self._delivered = True
        self._queue.put(result)

    def poll(self) -> StageResult[T] | None:
        """Return the result if it has arrived, without blocking."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def wait(self, timeout: float | None = None) -> StageResult[T] | None:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None


class BackgroundWorker:
    """Manages background worker threads with lifecycle control and graceful shutdown.

    Each submitted task runs on its own daemon thread and reports back through
    a :class:`StageChannel`; the caller polls the channel from the UI loop.
    """

    def __init__(self) -> None:
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    def submit(
        self,
        stage: str,
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> StageChannel[T]:
        """Run ``func`` in a background thread and return the channel it reports on.

        Any exception raised by ``func`` is logged and delivered as a failed
        :class:`StageResult`; it never escapes the thread.
        """
        channel: StageChannel[T] = StageChannel(stage)

        def wrapper() -> None:
            try:
                value = func(*args, **kwargs)
            except Exception as exc:
                logger.exception(f"Background stage '{stage}' failed: {exc}")
                result: StageResult[T] = StageResult(stage=stage, error=exc)
            else:
                result = StageResult(stage=stage, value=value)
            if self.is_stopped():
                logger.debug(f"Dropping result of '{stage}' after shutdown")
                return
            channel.send(result)

        thread = threading.Thread(target=wrapper, name=f"stage-{stage}", daemon=True)
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
        thread.start()
        logger.debug(f"Started background stage: {stage}")
        return channel

    def active_count(self) -> int:
        with self._lock:
            return sum(1 for thread in self._threads if thread.is_alive())

    def is_stopped(self) -> bool:
        """Check if the worker has been stopped."""
        return self._stop_event.is_set()

    def shutdown(self, timeout: float = 10.0) -> None:
        """Signal all threads to stop and wait for them to finish."""
        logger.info("Shutting down background worker...")
        self._stop_event.set()

        with self._lock:
            threads = list(self._threads)

        for thread in threads:
            if thread.is_alive():
                logger.debug(f"Waiting for thread {thread.name} to finish...")
                thread.join(timeout=timeout)
                if thread.is_alive():
                    logger.warning(f"Thread {thread.name} did not finish within {timeout}s")

        logger.info("Background worker shutdown complete")

    def __enter__(self) -> BackgroundWorker:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
