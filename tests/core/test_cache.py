"""
Test suite for TTLCache and cache keys.

System role: Verification of response/usage cache
"""

import pytest

from bookrag.core.cache import TTLCache, make_cache_key


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestTTLCache:
    """Test suite for TTLCache."""

    def test_get_should_return_value_before_expiry(self, clock: FakeClock) -> None:
        # Arrange
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "v")

        # Act
        clock.now = 9.9

        # Assert
        assert cache.get("k") == "v"
        assert cache.hits == 1

    def test_get_should_expire_after_ttl(self, clock: FakeClock) -> None:
        # Arrange
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "v")

        # Act
        clock.now = 10.0

        # Assert
        assert cache.get("k") is None
        assert len(cache) == 0
        assert cache.misses == 1

    def test_set_should_restart_ttl(self, clock: FakeClock) -> None:
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "old")
        clock.now = 8
        cache.set("k", "new")
        clock.now = 15

        assert cache.get("k") == "new"

    def test_set_should_evict_oldest_when_full(self, clock: FakeClock) -> None:
        # Arrange
        cache = TTLCache(ttl_seconds=10, max_entries=2, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)

        # Act
        cache.set("c", 3)

        # Assert
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_delete_and_clear_should_remove_entries(self, clock: FakeClock) -> None:
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)

        cache.delete("a")
        assert cache.get("a") is None
        cache.clear()
        assert len(cache) == 0

    @pytest.mark.parametrize("ttl, size", [(0, 10), (10, 0)])
    def test_init_should_reject_non_positive_limits(self, ttl: float, size: int) -> None:
        with pytest.raises(ValueError):
            TTLCache(ttl_seconds=ttl, max_entries=size)


class TestMakeCacheKey:
    """Test suite for make_cache_key."""

    def test_key_should_ignore_dict_ordering(self) -> None:
        first = make_cache_key("search", "q", {"book_id": "b", "category": "c"}, 5)
        second = make_cache_key("search", "q", {"category": "c", "book_id": "b"}, 5)

        assert first == second

    def test_key_should_differ_by_any_part(self) -> None:
        base = make_cache_key("search", "q", {}, 5)

        assert base != make_cache_key("search", "q", {}, 6)
        assert base != make_cache_key("search", "q2", {}, 5)
        assert base != make_cache_key("search", "q", {"book_id": "b"}, 5)
