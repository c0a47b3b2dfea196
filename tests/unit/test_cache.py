from __future__ import annotations

from storefront_search.services.cache import SearchCache, build_cache_key


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_build_cache_key_includes_request_shape() -> None:
    assert build_cache_key("robe", "FR", 20, "smart") == "search:q=robe&locale=FR&limit=20&mode=smart"
    key = build_cache_key("robe", "FR", 5, "simple", autocomplete=True, min_score=0.5)
    assert key == "search:q=robe&locale=FR&limit=5&mode=simple&autocomplete=1&min_score=0.5"


def test_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    cache: SearchCache[str] = SearchCache(max_entries=10, ttl_seconds=30, clock=clock)
    cache.set("k", "v")
    clock.advance(29.9)
    assert cache.get("k") == "v"
    clock.advance(0.1)
    assert cache.get("k") is None
    assert len(cache) == 0
    assert cache.stats()["hits"] == 1
    assert cache.stats()["misses"] == 1


def test_oldest_inserted_entry_is_evicted_even_if_recently_read() -> None:
    clock = FakeClock()
    cache: SearchCache[int] = SearchCache(max_entries=2, ttl_seconds=30, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)
    assert "a" not in cache
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_expired_entries_are_purged_before_live_ones() -> None:
    clock = FakeClock()
    cache: SearchCache[int] = SearchCache(max_entries=2, ttl_seconds=30, clock=clock)
    cache.set("old", 1)
    cache.set("short", 2, ttl=5)
    clock.advance(10)
    cache.set("new", 3)
    assert "old" in cache
    assert "short" not in cache
    assert len(cache) == 2


def test_overwriting_a_key_moves_it_to_the_back() -> None:
    clock = FakeClock()
    cache: SearchCache[int] = SearchCache(max_entries=2, ttl_seconds=30, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)
    cache.set("c", 3)
    assert "b" not in cache
    assert cache.get("a") == 10


def test_invalidate_and_clear() -> None:
    cache: SearchCache[int] = SearchCache()
    cache.set("a", 1)
    cache.set("b", 2)
    cache.invalidate("a")
    assert "a" not in cache
    cache.clear()
    assert len(cache) == 0
