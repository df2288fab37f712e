from solscan_agent.cache import DEFAULT_TTL_SECONDS, ResponseCache
from tests.conftest import FakeClock


def test_default_ttl_is_one_minute():
    assert DEFAULT_TTL_SECONDS == 60
    assert ResponseCache().ttl_seconds == 60


def test_set_then_get_within_ttl():
    clock = FakeClock()
    cache = ResponseCache(clock=clock)
    value = {"success": True, "data": {"lamports": 5}}

    cache.set("k", value)
    clock.now += 59.9

    assert cache.get("k") == {"success": True, "data": {"lamports": 5}}


def test_expired_entry_reads_as_miss_but_is_retained():
    clock = FakeClock()
    cache = ResponseCache(clock=clock)
    cache.set("k", {"v": 1})

    clock.now += 60
    assert cache.get("k") is None
    assert "k" in cache
    assert len(cache) == 1

    # Refresh overwrites the stale entry
    cache.set("k", {"v": 2})
    assert cache.get("k") == {"v": 2}
    assert len(cache) == 1


def test_missing_key():
    assert ResponseCache().get("nope") is None


def test_entries_accumulate_without_bound():
    cache = ResponseCache(clock=FakeClock())
    for i in range(500):
        cache.set(f"key-{i}", i)
    assert len(cache) == 500
    assert cache.get("key-0") == 0


def test_instances_are_isolated():
    a = ResponseCache()
    b = ResponseCache()
    a.set("k", 1)
    assert b.get("k") is None
