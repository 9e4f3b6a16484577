"""Unit tests for document store idempotency claims."""

import threading

import pytest

from infrastructure.idempotency import DocumentStoreIdempotencyCache, IdempotencyKeyBuilder
from infrastructure.persistence import InMemoryDocumentStore

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return DocumentStoreIdempotencyCache(InMemoryDocumentStore(), clock=clock)


class TestClaim:
    """Tests for claim and release."""

    def test_first_claim_wins(self, cache):
        assert cache.claim("job:1", ttl_seconds=60) is True
        assert cache.claim("job:1", ttl_seconds=60) is False

    def test_expired_claim_can_be_taken_over(self, cache, clock):
        cache.claim("job:1", ttl_seconds=60)
        clock.now += 61

        assert cache.claim("job:1", ttl_seconds=60) is True
        assert cache.claim("job:1", ttl_seconds=60) is False

    def test_release_allows_immediate_reclaim(self, cache):
        cache.claim("job:1", ttl_seconds=60)
        cache.release("job:1")

        assert cache.claim("job:1", ttl_seconds=60) is True

    def test_concurrent_claims_have_one_winner(self, cache):
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(cache.claim("job:race", ttl_seconds=60))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1

    def test_purge_drops_only_expired_claims(self, cache, clock):
        cache.claim("job:old", ttl_seconds=60)
        clock.now += 30
        cache.claim("job:new", ttl_seconds=60)
        clock.now += 31

        assert cache.purge_expired() == 1
        assert cache.claim("job:new", ttl_seconds=60) is False
        assert cache.claim("job:old", ttl_seconds=60) is True

    def test_get_stats_names_backend(self, cache):
        assert cache.get_stats()["backend"] == "InMemoryDocumentStore"


class TestIdempotencyKeyBuilder:
    """Tests for deterministic key generation."""

    def test_component_order_does_not_matter(self):
        builder = IdempotencyKeyBuilder("scheduled_notifications")

        first = builder.build("dispatch", notification_type_id="t", occurrence="o")
        second = builder.build("dispatch", occurrence="o", notification_type_id="t")

        assert first == second
        assert first.startswith("scheduled_notifications:dispatch:")

    def test_different_components_give_different_keys(self):
        builder = IdempotencyKeyBuilder("scheduled_notifications")

        assert builder.build("dispatch", emission_id="a") != builder.build(
            "dispatch", emission_id="b"
        )
