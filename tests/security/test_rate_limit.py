from __future__ import annotations

import pytest

from calendar_admin.main import create_app
from calendar_admin.security.rate_limit import (
    FixedWindowRateLimiter,
    InMemoryRateLimitStore,
    RateLimitTier,
    RedisRateLimitStore,
    build_store,
)
from config import testing as testing_settings
from conftest import login_as


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakePipeline:
    def __init__(self, redis):
        self._redis = redis
        self._ops = []

    def incr(self, key):
        self._ops.append(("incr", key))
        return self

    def expire(self, key, seconds):
        self._ops.append(("expire", key, seconds))
        return self

    def execute(self):
        out = []
        for op in self._ops:
            if op[0] == "incr":
                self._redis.values[op[1]] = self._redis.values.get(op[1], 0) + 1
                out.append(self._redis.values[op[1]])
            else:
                self._redis.ttls[op[1]] = op[2]
                out.append(True)
        self._ops = []
        return out


class FakeRedis:
    def __init__(self):
        self.values = {}
        self.ttls = {}

    def pipeline(self):
        return FakePipeline(self)


def test_fixed_window_allows_up_to_limit_then_resets():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(
        InMemoryRateLimitStore(),
        tiers={"tiny": RateLimitTier("tiny", 2, 60)},
        clock=clock,
    )

    results = [limiter.check("1.2.3.4", "tiny") for _ in range(3)]
    assert [r.allowed for r in results] == [True, True, False]
    assert [r.remaining for r in results] == [1, 0, 0]
    assert results[2].retry_after == 60

    clock.now += 30
    assert limiter.check("1.2.3.4", "tiny").retry_after == 30
    assert limiter.check("5.6.7.8", "tiny").allowed

    clock.now += 31
    assert limiter.check("1.2.3.4", "tiny").allowed


def test_tiers_are_counted_separately():
    limiter = FixedWindowRateLimiter(InMemoryRateLimitStore(), clock=FakeClock())
    for _ in range(5):
        assert limiter.check("ip", "strict").allowed
    assert not limiter.check("ip", "strict").allowed
    assert limiter.check("ip", "moderate").allowed


def test_memory_store_sweeps_expired_windows():
    store = InMemoryRateLimitStore(sweep_interval=300)
    store.hit("a", 60, now=0)
    store.hit("b", 60, now=10)
    assert len(store) == 2

    store.hit("c", 60, now=200)
    assert len(store) == 3  # sweep not due yet

    store.hit("c", 60, now=301)
    assert len(store) == 1


def test_redis_store_buckets_by_window():
    redis = FakeRedis()
    store = RedisRateLimitStore(redis, prefix="t:")

    assert store.hit("moderate:ip", 60, now=120.5) == (1, 180.0)
    assert store.hit("moderate:ip", 60, now=150.0) == (2, 180.0)
    assert store.hit("moderate:ip", 60, now=180.0) == (1, 240.0)
    assert redis.ttls == {"t:moderate:ip:2": 60, "t:moderate:ip:3": 60}


def test_build_store_from_url():
    assert isinstance(build_store(None), InMemoryRateLimitStore)
    assert isinstance(build_store("memory://"), InMemoryRateLimitStore)
    with pytest.raises(ValueError):
        build_store("ftp://nope")


def test_moderate_tier_over_http(client, world):
    login_as(client, world.alice)
    responses = [client.get("/api/calendar/items") for _ in range(150)]

    assert all(r.status_code == 200 for r in responses[:100])
    assert all(r.status_code == 429 for r in responses[100:])

    first, last_ok, blocked = responses[0], responses[99], responses[100]
    assert first.headers["X-RateLimit-Limit"] == "100"
    assert first.headers["X-RateLimit-Remaining"] == "99"
    assert last_ok.headers["X-RateLimit-Remaining"] == "0"
    assert int(blocked.headers["Retry-After"]) > 0
    assert blocked.headers["X-RateLimit-Remaining"] == "0"
    assert blocked.get_json()["error"] == "RateLimitError"


def test_clients_are_keyed_by_the_hop_the_trusted_proxy_saw(client, world):
    login_as(client, world.alice)
    for _ in range(100):
        client.get("/api/auth/me", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

    assert client.get("/api/auth/me", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429
    assert client.get("/api/auth/me", headers={"X-Forwarded-For": "10.0.0.2"}).status_code == 200


def test_rotating_the_client_supplied_hop_does_not_reset_login_limit(client):
    codes = [
        client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "nope"},
            headers={"X-Forwarded-For": f"198.51.100.{i}, 10.0.0.9"},
        ).status_code
        for i in range(6)
    ]
    assert codes == [401] * 5 + [429]


def test_forwarding_headers_are_ignored_without_a_trusted_proxy(world, monkeypatch):
    monkeypatch.setattr(testing_settings, "TRUSTED_PROXY_COUNT", 0)
    client = create_app(world.container(), settings_module="config.testing").test_client()

    codes = [
        client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "nope"},
            headers={"X-Forwarded-For": f"198.51.100.{i}", "X-Real-IP": f"198.51.100.{i}"},
        ).status_code
        for i in range(6)
    ]
    assert codes == [401] * 5 + [429]


def test_disabled_limiter_never_throttles(world):
    app = create_app(world.container(rate_limited=False), settings_module="config.testing")
    client = app.test_client()

    codes = {client.get("/api/auth/me").status_code for _ in range(120)}
    assert codes == {200}
    assert "X-RateLimit-Limit" not in client.get("/api/auth/me").headers
