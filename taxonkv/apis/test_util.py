import time

from .util import RateLimiter


def test_no_interval() -> None:
    limiter = RateLimiter(0)
    start = time.monotonic()
    for _ in range(100):
        limiter.wait()
    assert time.monotonic() - start < 1


def test_min_interval() -> None:
    limiter = RateLimiter(0.05)
    limiter.wait()
    start = time.monotonic()
    limiter.wait()
    limiter.wait()
    assert time.monotonic() - start >= 0.09
