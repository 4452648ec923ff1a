import threading
from typing import Callable, Optional

from repcoach.utils.logging_utils import logger


class DurationTimer:
    """
    Fixed-interval ticker on a daemon thread.
    Ticks and stop() share a lock, so once stop() returns no tick can fire.
    """

    def __init__(self, interval: float, on_tick: Callable[[], None]):
        self.interval = interval
        self.on_tick = on_tick
        self._stopped = threading.Event()
        self._lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stopped.is_set()

    def start(self):
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="duration-timer", daemon=True)
        self._thread.start()

    def _run(self):
        while not self._stopped.wait(self.interval):
            with self._lock:
                if self._stopped.is_set():
                    break
                try:
                    self.on_tick()
                except Exception as e:
                    logger.error(f"Timer tick failed: {e}")

    def stop(self):
        with self._lock:
            self._stopped.set()
