import threading
import time


class RateLimiter:
    """Enforces a minimum interval between consecutive calls.

    Safe to share between threads; callers queue up behind each other.

    """

    def __init__(self, min_interval: float) -> None:
        self.min_interval = min_interval
        self.last_time = 0.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        if self.min_interval <= 0:
            return
        with self._lock:
            elapsed = time.monotonic() - self.last_time
            wait_time = self.min_interval - elapsed
            if wait_time > 0:
                time.sleep(wait_time)
            self.last_time = time.monotonic()
