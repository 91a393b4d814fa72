"""Unit tests for the drain flag and in-flight connection tracking."""

import logging
import threading

from fileserver.lifecycle.state import ServerLifecycle


def start_tracked(
    lifecycle: ServerLifecycle, release: threading.Event
) -> threading.Thread:
    """Track and start a thread that runs until ``release`` is set."""
    thread = threading.Thread(target=release.wait, args=(5,))
    lifecycle.track_worker(thread)
    thread.start()
    return thread


class TestServerLifecycle:
    """Drain flag and grace-period waiting."""

    def test_not_draining_initially(self):
        assert not ServerLifecycle().is_draining()

    def test_begin_draining_sets_flag_and_logs(self, caplog):
        caplog.set_level(logging.INFO)
        lifecycle = ServerLifecycle()
        lifecycle.begin_draining()
        assert lifecycle.is_draining()
        assert any(
            getattr(r, "event", None) == "shutdown_started" for r in caplog.records
        )

    def test_wait_for_workers_returns_when_idle(self):
        assert ServerLifecycle().wait_for_workers(0.1)

    def test_wait_for_workers_joins_finishing_threads(self):
        """In-flight connections are allowed to complete."""
        lifecycle = ServerLifecycle()
        release = threading.Event()
        thread = start_tracked(lifecycle, release)
        release.set()
        assert lifecycle.wait_for_workers(5)
        assert not thread.is_alive()

    def test_released_workers_are_not_waited_for(self):
        lifecycle = ServerLifecycle()
        release = threading.Event()
        thread = start_tracked(lifecycle, release)
        lifecycle.release_worker(thread)
        try:
            assert lifecycle.wait_for_workers(0.1)
        finally:
            release.set()
            thread.join()

    def test_wait_for_workers_times_out(self, caplog):
        caplog.set_level(logging.WARNING)
        lifecycle = ServerLifecycle()
        release = threading.Event()
        thread = start_tracked(lifecycle, release)
        try:
            assert not lifecycle.wait_for_workers(0.2)
        finally:
            release.set()
            thread.join()
        record = next(
            r for r in caplog.records if getattr(r, "event", None) == "shutdown_timeout"
        )
        assert record.remaining_workers == 1
