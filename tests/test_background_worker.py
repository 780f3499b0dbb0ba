from __future__ import annotations

import threading
import time

import pytest

from utils.background_worker import BackgroundWorker, StageChannel, StageResult


def test_background_worker_submit_delivers_result():
    worker = BackgroundWorker()

    channel = worker.submit("double", lambda value: value * 2, 21)
    result = channel.wait(timeout=1.0)

    assert result is not None
    assert result.ok
    assert result.value == 42
    assert result.stage == "double"
    worker.shutdown()


def test_background_worker_delivers_failures():
    worker = BackgroundWorker()

    def task():
        raise ValueError("bad input")

    result = worker.submit("failing", task).wait(timeout=1.0)

    assert result is not None
    assert not result.ok
    assert isinstance(result.error, ValueError)
    assert result.message == "bad input"
    worker.shutdown()


def test_channel_poll_does_not_block():
    worker = BackgroundWorker()
    release = threading.Event()

    channel = worker.submit("blocked", release.wait, 2.0)

    assert channel.poll() is None
    release.set()
    assert channel.wait(timeout=1.0) is not None
    assert channel.poll() is None
    worker.shutdown()


def test_channel_is_written_once():
    channel: StageChannel[int] = StageChannel("once")
    channel.send(StageResult(stage="once", value=1))

    with pytest.raises(RuntimeError):
        channel.send(StageResult(stage="once", value=2))


def test_background_worker_is_stopped():
    worker = BackgroundWorker()

    assert not worker.is_stopped()

    worker.shutdown()

    assert worker.is_stopped()


def test_background_worker_stops_loop():
    worker = BackgroundWorker()
    iterations = []

    def loop_task():
        while not worker.is_stopped():
            iterations.append(1)
            time.sleep(0.05)

    worker.submit("loop", loop_task)
    time.sleep(0.2)

    worker.shutdown(timeout=2.0)

    initial_count = len(iterations)
    time.sleep(0.2)
    final_count = len(iterations)

    assert initial_count > 0
    assert initial_count == final_count


def test_results_after_shutdown_are_dropped():
    worker = BackgroundWorker()
    release = threading.Event()

    channel = worker.submit("late", lambda: release.wait(2.0))
    worker.shutdown(timeout=0.1)
    release.set()
    time.sleep(0.1)

    assert channel.poll() is None


def test_failures_after_shutdown_are_dropped():
    worker = BackgroundWorker()
    release = threading.Event()

    def fail_late():
        release.wait(2.0)
        raise RuntimeError("too late")

    channel = worker.submit("late-failure", fail_late)
    worker.shutdown(timeout=0.1)
    release.set()
    time.sleep(0.1)

    assert channel.poll() is None


def test_background_worker_context_manager():
    with BackgroundWorker() as worker:
        channel = worker.submit("ctx", lambda: "done")
        result = channel.wait(timeout=1.0)

    assert result.value == "done"
    assert worker.is_stopped()


def test_background_worker_multiple_threads():
    worker = BackgroundWorker()

    channels = [worker.submit(f"task-{value}", lambda v=value: v) for value in (1, 2, 3)]
    results = [channel.wait(timeout=1.0) for channel in channels]
    worker.shutdown()

    assert sorted(result.value for result in results) == [1, 2, 3]


def test_background_worker_shutdown_timeout():
    worker = BackgroundWorker()
    started = threading.Event()

    def blocking_task():
        started.set()
        while True:
            time.sleep(0.1)

    worker.submit("blocking", blocking_task)
    started.wait(timeout=1.0)

    worker.shutdown(timeout=0.2)

    assert worker.is_stopped()
    assert worker.active_count() == 1
