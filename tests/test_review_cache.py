"""Tests for the TTL review cache."""

from rufheld.infrastructure.cache import InMemoryBackend, ReviewCache


class FakeClock:
    """Millisecond clock under test control."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_cache(ttl_seconds: float = 300, max_entries: int = 0):
    clock = FakeClock(1_000_000.0)
    return ReviewCache(ttl_seconds=ttl_seconds, max_entries=max_entries, clock=clock), clock


class TestFreshness:

    def test_get_returns_payload_before_ttl(self):
        cache, clock = make_cache()
        payload = {"success": True, "reviews": [{"id": "r1"}]}
        cache.put("place_0_lowest_rating", payload)

        clock.now += 299_999
        assert cache.get("place_0_lowest_rating") is payload

    def test_get_returns_none_after_ttl_but_entry_stays(self):
        cache, clock = make_cache()
        cache.put("place_0_lowest_rating", {"success": True})

        clock.now += 300_000
        assert cache.get("place_0_lowest_rating") is None
        # Lookup does not delete the stale entry
        assert len(cache) == 1
        assert cache.backend.peek("place_0_lowest_rating") is not None

    def test_put_overwrites_and_restamps(self):
        cache, clock = make_cache()
        cache.put("k", {"v": 1})
        clock.now += 200_000
        cache.put("k", {"v": 2})
        clock.now += 200_000

        assert cache.get("k") == {"v": 2}
        assert len(cache) == 1

    def test_missing_key(self):
        cache, _ = make_cache()
        assert cache.get("unknown") is None


class TestKeys:

    def test_make_key_joins_components(self):
        assert ReviewCache.make_key("abc", 10, "lowest_rating") == "abc_10_lowest_rating"

    def test_offsets_and_sorts_are_independent_entries(self):
        cache, _ = make_cache()
        first = ReviewCache.make_key("abc", 0, "lowest_rating")
        second = ReviewCache.make_key("abc", 10, "lowest_rating")
        third = ReviewCache.make_key("abc", 0, "newest")

        cache.put(first, {"page": 0})

        assert cache.get(second) is None
        assert cache.get(third) is None
        assert cache.get(first) == {"page": 0}


class TestEviction:

    def test_no_cap_keeps_everything(self):
        cache, _ = make_cache(max_entries=0)
        for i in range(50):
            cache.put(f"k{i}", i)
        assert len(cache) == 50

    def test_least_recently_used_entry_is_evicted(self):
        cache, _ = make_cache(max_entries=2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get("a")  # a becomes most recently used
        cache.put("c", 3)

        assert len(cache) == 2
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_expired_entries_are_swept_before_fresh_ones(self):
        cache, clock = make_cache(ttl_seconds=1, max_entries=2)
        cache.put("old", 1)
        clock.now += 5_000
        cache.put("fresh", 2)
        cache.get("old")  # touch it; being stale still makes it the first to go
        cache.put("newest", 3)

        assert cache.backend.peek("old") is None
        assert cache.get("fresh") == 2
        assert cache.get("newest") == 3


class TestInMemoryBackend:

    def test_peek_does_not_change_recency(self):
        backend = InMemoryBackend()
        cache = ReviewCache(ttl_seconds=300, max_entries=2, backend=backend, clock=FakeClock(0))
        cache.put("a", 1)
        cache.put("b", 2)
        backend.peek("a")
        cache.put("c", 3)

        assert backend.peek("a") is None
        assert list(backend.keys()) == ["b", "c"]
