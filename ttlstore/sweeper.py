from __future__ import annotations

import inspect
import logging
import threading
import weakref
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Sweeper:
    """Runs ``sweep`` every ``interval`` seconds on a daemon thread until stopped.

    A bound method is held weakly, so the thread exits on its own once the
    owning object is garbage collected. A failing pass is logged and the loop
    keeps going: nothing supervises this thread, and if it died every later
    expiration would silently stop.
    """

    def __init__(
        self,
        sweep: Callable[[], int],
        *,
        interval: float,
        name: str = "ttlstore-sweeper",
    ) -> None:
        if not interval > 0:
            raise ValueError("interval must be > 0 seconds")
        if inspect.ismethod(sweep):
            self._sweep_ref: Callable[[], Callable[[], int] | None] = weakref.WeakMethod(sweep)
        else:
            self._sweep_ref = lambda: sweep
        self._interval = float(interval)
        self._name = name
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.passes = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("sweeper already started")
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int | None:
        """One pass. Returns None once the owner of a weakly held sweep is gone."""
        sweep = self._sweep_ref()
        if sweep is None:
            return None
        evicted = sweep()
        self.passes += 1
        if evicted:
            logger.debug("sweep evicted %d expired entries", evicted)
        return evicted

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                if self.run_once() is None:
                    logger.debug("sweeper owner was collected; exiting")
                    return
            except Exception:
                logger.exception("sweep pass failed")
