"""Tests for cleaning_scheduler.data.cache - TTLCache."""

from cleaning_scheduler.data.cache import TTLCache


class FakeTimer:
    def __init__(self) -> None:
        self.t = 1000.0

    def __call__(self) -> float:
        return self.t


class TestTTLCacheGetSet:
    def test_miss_returns_none(self):
        cache = TTLCache()
        assert cache.get("schedule:id:1") is None

    def test_set_then_get(self):
        cache = TTLCache()
        cache.set("schedule:id:1", {"name": "A"})
        assert cache.get("schedule:id:1") == {"name": "A"}

    def test_returns_copy_not_shared_reference(self):
        cache = TTLCache()
        value = [{"name": "A"}]
        cache.set("schedule:query:x", value)
        value[0]["name"] = "mutated"
        fetched = cache.get("schedule:query:x")
        fetched.append({"name": "B"})
        assert cache.get("schedule:query:x") == [{"name": "A"}]

    def test_empty_list_is_a_hit(self):
        cache = TTLCache()
        cache.set("schedule:query:x", [])
        assert cache.get("schedule:query:x") == []


class TestTTLCacheExpiry:
    def test_entry_valid_before_ttl(self):
        timer = FakeTimer()
        cache = TTLCache(ttl_seconds=300, clock=timer)
        cache.set("stats:cleaning", 1)
        timer.t += 299
        assert cache.get("stats:cleaning") == 1

    def test_entry_absent_at_ttl(self):
        timer = FakeTimer()
        cache = TTLCache(ttl_seconds=300, clock=timer)
        cache.set("stats:cleaning", 1)
        timer.t += 300
        assert cache.get("stats:cleaning") is None
        assert len(cache) == 0

    def test_per_entry_ttl_override(self):
        timer = FakeTimer()
        cache = TTLCache(ttl_seconds=300, clock=timer)
        cache.set("stats:cleaning", 1, ttl=10)
        timer.t += 11
        assert cache.get("stats:cleaning") is None


class TestTTLCacheInvalidation:
    def test_invalidate_single_key(self):
        cache = TTLCache()
        cache.set("schedule:id:1", 1)
        cache.set("schedule:id:2", 2)
        cache.invalidate("schedule:id:1")
        assert cache.get("schedule:id:1") is None
        assert cache.get("schedule:id:2") == 2

    def test_invalidate_namespaces(self):
        cache = TTLCache()
        cache.set("schedule:id:1", 1)
        cache.set("schedule:query:{}", [])
        cache.set("stats:cleaning", 3)
        cache.set("other:key", 4)
        removed = cache.invalidate_namespace("schedule", "stats")
        assert removed == 3
        assert cache.get("other:key") == 4
        assert cache.get("stats:cleaning") is None

    def test_namespace_match_is_exact_prefix(self):
        cache = TTLCache()
        cache.set("schedules_extra:1", 1)
        cache.invalidate_namespace("schedule")
        assert cache.get("schedules_extra:1") == 1

    def test_clear(self):
        cache = TTLCache()
        cache.set("schedule:id:1", 1)
        cache.clear()
        assert len(cache) == 0


class TestTTLCacheDegradation:
    def test_uncopyable_value_reads_as_miss(self):
        cache = TTLCache()

        class Exploding:
            def __deepcopy__(self, memo):
                raise RuntimeError("boom")

        # Bypass set() (which would also fail) to simulate a corrupt entry.
        from cleaning_scheduler.data.cache import CacheEntry
        cache._entries["schedule:id:9"] = CacheEntry(Exploding(), written_at=0.0, ttl=1e9)

        assert cache.get("schedule:id:9") is None
        assert len(cache) == 0
