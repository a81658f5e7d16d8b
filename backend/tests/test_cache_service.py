import threading
import time

import pytest

from services.cache_service import TTLCache
from services.errors import CacheComputeError


def test_live_entry_is_returned_without_recompute(fake_clock):
    cache = TTLCache(ttl=60, clock=fake_clock)
    calls = []

    def compute():
        calls.append(1)
        return {"value": len(calls)}

    first = cache.cached("k", compute)
    second = cache.cached("k", compute)

    assert first == second == {"value": 1}
    assert len(calls) == 1
    assert cache.stats()["hits"] == 1
    assert cache.stats()["misses"] == 1


def test_ttl_boundary(fake_clock):
    cache = TTLCache(ttl=60, clock=fake_clock)
    calls = []

    def compute():
        calls.append(1)
        return len(calls)

    assert cache.cached("k", compute, ttl=60) == 1

    fake_clock.advance(60 - 0.001)
    assert cache.cached("k", compute, ttl=60) == 1

    fake_clock.advance(0.002)
    assert cache.cached("k", compute, ttl=60) == 2
    assert len(calls) == 2


def test_single_flight_shares_one_computation():
    cache = TTLCache(ttl=60)
    release = threading.Event()
    started = threading.Event()
    invocations = []
    results = []
    errors = []

    def compute():
        invocations.append(1)
        started.set()
        release.wait(timeout=5)
        return "shared"

    def caller():
        try:
            results.append(cache.cached("same-key", compute))
        except Exception as e:  # pragma: no cover - surfaced by the assertion below
            errors.append(e)

    threads = [threading.Thread(target=caller) for _ in range(8)]
    for t in threads:
        t.start()

    assert started.wait(timeout=5)
    # Give the other callers time to reach the in-flight wait
    deadline = time.monotonic() + 5
    while cache.stats()["shared"] < 7 and time.monotonic() < deadline:
        time.sleep(0.01)
    release.set()
    for t in threads:
        t.join(timeout=5)

    assert errors == []
    assert results == ["shared"] * 8
    assert len(invocations) == 1
    assert cache.stats()["in_flight"] == 0


def test_failure_is_not_cached_and_retries(fake_clock):
    cache = TTLCache(ttl=60, clock=fake_clock)
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("db down")
        return "ok"

    with pytest.raises(CacheComputeError) as exc_info:
        cache.cached("k", flaky)

    assert isinstance(exc_info.value.original, RuntimeError)
    assert cache.get("k") is None
    assert cache.cached("k", flaky) == "ok"
    assert len(attempts) == 2


def test_waiters_receive_the_owner_failure():
    cache = TTLCache(ttl=60)
    release = threading.Event()
    started = threading.Event()
    outcomes = []

    def failing():
        started.set()
        release.wait(timeout=5)
        raise ValueError("boom")

    def caller():
        try:
            cache.cached("k", failing)
            outcomes.append("ok")
        except CacheComputeError as e:
            outcomes.append(type(e.original).__name__)

    owner = threading.Thread(target=caller)
    owner.start()
    assert started.wait(timeout=5)
    waiter = threading.Thread(target=caller)
    waiter.start()

    deadline = time.monotonic() + 5
    while cache.stats()["shared"] < 1 and time.monotonic() < deadline:
        time.sleep(0.01)
    release.set()
    owner.join(timeout=5)
    waiter.join(timeout=5)

    assert outcomes == ["ValueError", "ValueError"]
    assert cache.stats()["size"] == 0


def test_interrupted_compute_releases_the_key(fake_clock):
    class Interrupted(BaseException):
        pass

    cache = TTLCache(ttl=60, clock=fake_clock)

    def interrupted():
        raise Interrupted()

    with pytest.raises(Interrupted):
        cache.cached("k", interrupted)

    assert cache.stats()["in_flight"] == 0

    results = []
    retry = threading.Thread(target=lambda: results.append(cache.cached("k", lambda: "ok")))
    retry.start()
    retry.join(timeout=1)

    assert not retry.is_alive()
    assert results == ["ok"]


def test_waiter_of_interrupted_compute_gets_an_error():
    class Interrupted(BaseException):
        pass

    cache = TTLCache(ttl=60)
    release = threading.Event()
    started = threading.Event()
    outcomes = []

    def interrupted():
        started.set()
        release.wait(timeout=5)
        raise Interrupted()

    def owner_call():
        try:
            cache.cached("k", interrupted)
        except Interrupted:
            outcomes.append("owner interrupted")

    def waiter_call():
        try:
            cache.cached("k", lambda: "unused")
        except CacheComputeError as e:
            outcomes.append(type(e.original).__name__)

    owner = threading.Thread(target=owner_call)
    owner.start()
    assert started.wait(timeout=5)
    waiter = threading.Thread(target=waiter_call)
    waiter.start()

    deadline = time.monotonic() + 5
    while cache.stats()["shared"] < 1 and time.monotonic() < deadline:
        time.sleep(0.01)
    release.set()
    owner.join(timeout=5)
    waiter.join(timeout=5)

    assert not waiter.is_alive()
    assert sorted(outcomes) == ["Interrupted", "owner interrupted"]


def test_store_failure_degrades_to_recompute():
    class BrokenClockOnStore:
        """Clock that works for reads but raises while storing."""

        def __init__(self):
            self.calls = 0

        def __call__(self):
            self.calls += 1
            if self.calls % 2 == 0:
                raise MemoryError("no room")
            return 0.0

    cache = TTLCache(ttl=60, clock=BrokenClockOnStore())
    calls = []

    def compute():
        calls.append(1)
        return "value"

    assert cache.cached("k", compute) == "value"
    assert cache.cached("k", compute) == "value"
    assert len(calls) == 2
    assert cache.stats()["store_failures"] == 2


def test_maxsize_evicts_oldest(fake_clock):
    cache = TTLCache(maxsize=2, ttl=60, clock=fake_clock)

    cache.set("a", 1)
    fake_clock.advance(1)
    cache.set("b", 2)
    fake_clock.advance(1)
    cache.set("c", 3)

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_clear_by_pattern(fake_clock):
    cache = TTLCache(ttl=60, clock=fake_clock)
    cache.set('dashboard-top:{"platform": "Shopee"}', 1)
    cache.set('dashboard-top:{}', 2)
    cache.set('other:{}', 3)

    assert cache.clear("dashboard-top") == 2
    assert cache.stats()["keys"] == ['other:{}']
    assert cache.clear() == 1
    assert cache.stats()["size"] == 0
