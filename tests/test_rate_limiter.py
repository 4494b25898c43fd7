import pytest

from salus.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter


def test_memory_rate_limiter_allows_then_blocks():
    rl = InMemoryRateLimiter()
    key = "login:USER:a@b.com"
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is True
    assert rl.allow(key, max_requests=2, window_seconds=60) is False


def test_memory_rate_limiter_window_slides():
    now = [1000.0]
    rl = InMemoryRateLimiter(clock=lambda: now[0])
    assert rl.allow("k", 1, 60) is True
    assert rl.allow("k", 1, 60) is False
    now[0] += 61
    assert rl.allow("k", 1, 60) is True


def test_memory_rate_limiter_keys_are_independent():
    rl = InMemoryRateLimiter()
    assert rl.allow("resend:a", 1, 60) is True
    assert rl.allow("resend:b", 1, 60) is True


def test_redis_rate_limiter_with_fake():
    pytest.importorskip("redis")
    from salus.infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter

    class FakePipe:
        def __init__(self, client):
            self.client = client
            self.ops = []

        def incr(self, k, n):
            self.ops.append(("incr", k, n))
            return self

        def expire(self, k, s):
            self.ops.append(("expire", k, s))
            return self

        def execute(self):
            results = []
            for op, k, arg in self.ops:
                if op == "incr":
                    self.client.store[k] = self.client.store.get(k, 0) + arg
                    results.append(self.client.store[k])
                else:
                    self.client.expiry[k] = arg
                    results.append(True)
            return results

    class FakeRedis:
        def __init__(self):
            self.store = {}
            self.expiry = {}

        def pipeline(self):
            return FakePipe(self)

    client = FakeRedis()
    rl = RedisRateLimiter(client=client)

    assert rl.allow("k1", 2, 60) is True
    assert rl.allow("k1", 2, 60) is True
    assert rl.allow("k1", 2, 60) is False
    assert client.expiry == {"rl:k1:60": 60}
