"""Drain flag and the set of connection threads still being served."""

import threading
import time

from fileserver.domain.connection_log import ComponentLogger

LIFECYCLE_LOGGER = ComponentLogger("lifecycle")


class ServerLifecycle:
    """Shared between the accept loop, the signal handler and the workers."""

    def __init__(self) -> None:
        self._draining = threading.Event()
        self._lock = threading.Lock()
        self._workers: set[threading.Thread] = set()

    def is_draining(self) -> bool:
        return self._draining.is_set()

    def begin_draining(self) -> None:
        """Stop accepting; connections already being served run to completion."""
        self._draining.set()
        LIFECYCLE_LOGGER.info(
            "Beginning graceful shutdown", extra={"event": "shutdown_started"}
        )

    def track_worker(self, thread: threading.Thread) -> None:
        """Record ``thread``; called by the acceptor before the thread starts."""
        with self._lock:
            self._workers.add(thread)

    def release_worker(self, thread: threading.Thread) -> None:
        with self._lock:
            self._workers.discard(thread)

    def wait_for_workers(self, timeout: float) -> bool:
        """Join tracked threads until all finish or ``timeout`` seconds pass."""
        deadline = time.monotonic() + timeout
        with self._lock:
            pending = list(self._workers)
        for worker in pending:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            worker.join(timeout=remaining)
        still_running = [worker for worker in pending if worker.is_alive()]
        if still_running:
            LIFECYCLE_LOGGER.warning(
                "Shutdown timeout exceeded",
                extra={
                    "event": "shutdown_timeout",
                    "remaining_workers": len(still_running),
                },
            )
            return False
        return True
