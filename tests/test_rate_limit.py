from ibdaily.services.rate_limit import RateLimiter


def test_allows_up_to_limit():
    limiter = RateLimiter(2, window_seconds=60)

    assert limiter.hit("1.2.3.4", now=0) is None
    assert limiter.hit("1.2.3.4", now=1) is None
    assert limiter.hit("1.2.3.4", now=2) == 58


def test_window_slides():
    limiter = RateLimiter(1, window_seconds=60)
    limiter.hit("key", now=0)

    assert limiter.hit("key", now=59) == 1
    assert limiter.hit("key", now=60) is None


def test_keys_are_independent():
    limiter = RateLimiter(1, window_seconds=60)
    limiter.hit("a", now=0)

    assert limiter.hit("b", now=0) is None


def test_reset_single_key():
    limiter = RateLimiter(1, window_seconds=60)
    limiter.hit("a", now=0)
    limiter.hit("b", now=0)

    limiter.reset("a")

    assert limiter.hit("a", now=1) is None
    assert limiter.hit("b", now=1) is not None
