from __future__ import annotations

from datetime import datetime, timezone

from hotdeal_agent.models import Listing, Watermark
from hotdeal_agent.services.reconciler import Transition, reconcile


NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def _batch(*ids: int) -> list[Listing]:
    return [Listing(id=i, title=f"deal {i}", url=f"https://www.fmkorea.com/{i}") for i in ids]


def test_advance_returns_new_listings_oldest_first() -> None:
    result = reconcile(_batch(105, 103, 101), Watermark(last_seen_id=100), now=NOW)

    assert result.transition is Transition.ADVANCE
    assert [l.id for l in result.new_listings] == [101, 103, 105]
    assert result.watermark.last_seen_id == 105
    assert result.watermark.last_checked_at == NOW
    assert result.should_persist


def test_advance_only_includes_ids_above_watermark() -> None:
    result = reconcile(_batch(105, 103, 101), Watermark(last_seen_id=103))
    assert [l.id for l in result.new_listings] == [105]


def test_repair_when_watermark_is_ahead() -> None:
    result = reconcile(_batch(105, 103, 101), Watermark(last_seen_id=999999))

    assert result.transition is Transition.REPAIR
    assert result.new_listings == []
    assert result.watermark.last_seen_id == 105
    assert result.should_persist


def test_idle_keeps_watermark_and_skips_write() -> None:
    stored = Watermark(last_seen_id=105, last_checked_at=NOW)
    result = reconcile(_batch(105, 103), stored)

    assert result.transition is Transition.IDLE
    assert result.new_listings == []
    assert result.watermark is stored
    assert not result.should_persist


def test_empty_batch_is_a_noop() -> None:
    stored = Watermark(last_seen_id=7)
    result = reconcile([], stored)

    assert result.transition is Transition.EMPTY
    assert result.watermark is stored
    assert not result.should_persist


def test_reconcile_is_idempotent() -> None:
    batch = _batch(105, 103, 101)
    first = reconcile(batch, Watermark(last_seen_id=0))
    second = reconcile(batch, first.watermark)

    assert len(first.new_listings) == 3
    assert second.new_listings == []
    assert second.transition is Transition.IDLE
