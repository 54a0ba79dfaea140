import unittest
from unittest.mock import MagicMock, patch

from redis import exceptions as redis_exceptions

from gateway.rate_limit import InMemoryRateLimiter, RateLimitResult, RedisRateLimiter


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class InMemoryRateLimiterTests(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.limiter = InMemoryRateLimiter(limit=2, window_seconds=60, clock=self.clock)

    def test_counts_within_window(self):
        first = self.limiter.hit("1.2.3.4")
        self.assertEqual(first, RateLimitResult(True, 2, 1, 60))
        self.clock.now = 10
        second = self.limiter.hit("1.2.3.4")
        self.assertTrue(second.allowed)
        self.assertEqual(second.remaining, 0)
        self.assertEqual(second.reset_in, 50)

        third = self.limiter.hit("1.2.3.4")
        self.assertFalse(third.allowed)
        self.assertEqual(third.remaining, 0)

    def test_keys_are_independent(self):
        self.limiter.hit("a")
        self.limiter.hit("a")
        self.assertFalse(self.limiter.hit("a").allowed)
        self.assertTrue(self.limiter.hit("b").allowed)

    def test_window_resets(self):
        for _ in range(3):
            self.limiter.hit("a")
        self.clock.now = 60
        result = self.limiter.hit("a")
        self.assertTrue(result.allowed)
        self.assertEqual(result.remaining, 1)
        self.assertEqual(result.reset_in, 60)

    def test_expired_windows_are_evicted(self):
        for index in range(5000):
            self.limiter.hit(f"10.0.{index // 256}.{index % 256}")
        self.assertEqual(len(self.limiter.windows), 5000)
        self.clock.now = 61
        self.limiter.hit("live")
        self.assertEqual(list(self.limiter.windows), ["live"])

    def test_live_windows_survive_a_sweep(self):
        self.limiter.hit("old")
        self.clock.now = 30
        self.limiter.hit("recent")
        self.clock.now = 60
        self.limiter.hit("new")
        self.assertEqual(set(self.limiter.windows), {"recent", "new"})
        self.assertEqual(self.limiter.windows["recent"], (30, 1))

    def test_reset_clears_windows(self):
        for _ in range(3):
            self.limiter.hit("a")
        self.limiter.reset()
        self.assertTrue(self.limiter.hit("a").allowed)


class RedisRateLimiterTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("gateway.rate_limit.redis.Redis.from_url")
        self.from_url = patcher.start()
        self.addCleanup(patcher.stop)
        self.client = MagicMock()
        self.from_url.return_value = self.client
        self.pipe = self.client.pipeline.return_value
        self.limiter = RedisRateLimiter(
            "redis://localhost:6379/0", limit=100, window_seconds=900, key_prefix="rl:"
        )

    def test_hit_uses_incr_and_expiry(self):
        self.pipe.execute.return_value = [1, True, 900]
        result = self.limiter.hit("1.2.3.4")
        self.assertEqual(result, RateLimitResult(True, 100, 99, 900))
        self.pipe.incr.assert_called_once_with("rl:1.2.3.4")
        self.pipe.expire.assert_called_once_with("rl:1.2.3.4", 900, nx=True)
        self.pipe.ttl.assert_called_once_with("rl:1.2.3.4")

    def test_over_limit(self):
        self.pipe.execute.return_value = [101, False, 42]
        result = self.limiter.hit("1.2.3.4")
        self.assertFalse(result.allowed)
        self.assertEqual(result.remaining, 0)
        self.assertEqual(result.reset_in, 42)

    def test_missing_ttl_falls_back_to_window(self):
        self.pipe.execute.return_value = [3, False, -1]
        self.assertEqual(self.limiter.hit("k").reset_in, 900)

    def test_connection_error_allows_and_reconnects(self):
        self.pipe.execute.side_effect = redis_exceptions.ConnectionError("reset")
        with self.assertLogs("gateway.rate_limit", level="WARNING"):
            result = self.limiter.hit("1.2.3.4")
        self.assertTrue(result.allowed)
        self.assertEqual(self.from_url.call_count, 2)

    def test_timeout_allows_and_reconnects(self):
        self.pipe.execute.side_effect = redis_exceptions.TimeoutError("timed out")
        with self.assertLogs("gateway.rate_limit", level="WARNING"):
            result = self.limiter.hit("1.2.3.4")
        self.assertEqual(result, RateLimitResult(True, 100, 100, 900))
        self.assertEqual(self.from_url.call_count, 2)

    def test_command_error_allows_without_reconnect(self):
        self.pipe.execute.side_effect = redis_exceptions.ResponseError(
            "ERR wrong number of arguments for 'expire' command"
        )
        with self.assertLogs("gateway.rate_limit", level="WARNING"):
            result = self.limiter.hit("1.2.3.4")
        self.assertTrue(result.allowed)
        self.assertEqual(self.from_url.call_count, 1)


if __name__ == "__main__":
    unittest.main()
