"""
Tests for the bounded worker pool.
"""

import threading

import pytest

from pool import WorkerPool


def test_rejects_empty_pool():
    with pytest.raises(ValueError):
        WorkerPool(lambda job: None, size=0)


def test_runs_every_job():
    seen = []
    lock = threading.Lock()
    done = threading.Event()

    def handler(job):
        with lock:
            seen.append(job)
            if len(seen) == 50:
                done.set()

    pool = WorkerPool(handler, size=3)
    pool.start()
    for i in range(50):
        pool.submit(i)
    assert done.wait(5)
    pool.stop(5)
    assert sorted(seen) == list(range(50))


def test_never_exceeds_pool_size():
    active = 0
    peak = 0
    lock = threading.Lock()
    release = threading.Event()

    def handler(job):
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        release.wait(5)
        with lock:
            active -= 1

    pool = WorkerPool(handler, size=2)
    pool.start()
    for i in range(6):
        pool.submit(i)
    threading.Timer(0.2, release.set).start()
    pool.stop(5)
    assert peak <= 2


def test_worker_survives_handler_error():
    results = []
    done = threading.Event()

    def handler(job):
        if job == "boom":
            raise RuntimeError("boom")
        results.append(job)
        done.set()

    pool = WorkerPool(handler, size=1)
    pool.start()
    pool.submit("boom")
    pool.submit("ok")
    assert done.wait(5)
    pool.stop(5)
    assert results == ["ok"]


def test_stop_joins_workers():
    pool = WorkerPool(lambda job: None, size=4)
    pool.start()
    threads = list(pool._threads)
    assert len(threads) == 4
    pool.stop(5)
    assert not any(t.is_alive() for t in threads)
    assert pool.pending() == 0
