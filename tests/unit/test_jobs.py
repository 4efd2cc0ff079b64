import threading

import pytest

from chon.workers import jobs


def test_run_with_retries_succeeds_after_failures():
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise RuntimeError("transient")
        return "done"

    assert jobs.run_with_retries(flaky) == "done"
    assert len(attempts) == 3


def test_run_with_retries_reraises_after_max_tries():
    attempts = []

    def broken():
        attempts.append(1)
        raise RuntimeError("permanent")

    with pytest.raises(RuntimeError, match="permanent"):
        jobs.run_with_retries(broken)
    assert len(attempts) == jobs.MAX_TRIES


def test_sync_dispatch_runs_inline_and_swallows_failure(monkeypatch):
    monkeypatch.setenv("JOB_DISPATCH_MODE", "sync")
    calls = []

    def boom(value):
        calls.append(value)
        raise ValueError("nope")

    assert jobs.dispatch(boom, 5) is None
    assert calls == [5, 5, 5]


def test_thread_dispatch_runs_in_background(monkeypatch):
    monkeypatch.setenv("JOB_DISPATCH_MODE", "thread")
    done = threading.Event()

    thread = jobs.dispatch(done.set)
    assert thread is not None
    thread.join(timeout=5)
    assert done.is_set()
