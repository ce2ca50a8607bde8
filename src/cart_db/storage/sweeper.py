from __future__ import annotations

import logging
import threading
import typing as t

from .memory import InMemoryCartStore, SweepResult

_logger = logging.getLogger(__name__)


class Sweeper:
    """Runs `InMemoryCartStore.sweep` on a fixed interval in a daemon thread.

    The thread never keeps the interpreter alive, and `stop()` returns once
    the current pass (itself time-bounded) has finished.
    """

    def __init__(self, store: InMemoryCartStore, interval_ms: int) -> None:
        if interval_ms <= 0:
            raise ValueError("sweep interval must be positive")
        self._store = store
        self._interval = interval_ms / 1000.0
        self._stop = threading.Event()
        self._thread: t.Optional[threading.Thread] = None
        self._guard = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._guard:
            if self.running:
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, name="cart-sweeper", daemon=True)
            self._thread.start()
        _logger.info("Cart sweeper started (interval=%.3fs)", self._interval)

    def stop(self, timeout: t.Optional[float] = 5.0) -> None:
        with self._guard:
            thread = self._thread
            if thread is None:
                return
            self._stop.set()
            self._thread = None
        thread.join(timeout)
        _logger.info("Cart sweeper stopped")

    def run_once(self) -> SweepResult:
        return self._store.sweep()

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self._store.sweep()
            except Exception:
                _logger.exception("Cart sweep failed")
