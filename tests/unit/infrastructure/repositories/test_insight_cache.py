from __future__ import annotations

from datetime import datetime, timezone

from src.domain.entities.insight import InsightSnapshot
from src.infrastructure.repositories.insight_cache import InMemoryInsightCache


def _snapshot() -> InsightSnapshot:
    return InsightSnapshot(records=(), generated_at=datetime.now(timezone.utc))


def test_empty_cache_returns_none(insight_cache: InMemoryInsightCache) -> None:
    assert insight_cache.get() is None


def test_snapshot_served_until_ttl_elapses(insight_cache, fake_clock) -> None:
    snapshot = _snapshot()
    insight_cache.set(snapshot)

    fake_clock.advance(299)
    assert insight_cache.get() is snapshot

    fake_clock.advance(1)
    assert insight_cache.get() is None


def test_per_write_ttl_override(insight_cache, fake_clock) -> None:
    insight_cache.set(_snapshot(), ttl_seconds=10)

    fake_clock.advance(10)

    assert insight_cache.get() is None


def test_set_replaces_previous_snapshot(insight_cache, fake_clock) -> None:
    first, second = _snapshot(), _snapshot()
    insight_cache.set(first)
    fake_clock.advance(200)
    insight_cache.set(second)
    fake_clock.advance(200)

    assert insight_cache.get() is second


def test_clear_drops_snapshot(insight_cache) -> None:
    insight_cache.set(_snapshot())
    insight_cache.clear()

    assert insight_cache.get() is None
