"""Decide which listings are new relative to the stored watermark."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Sequence

from hotdeal_agent.models import Listing, Watermark


class Transition(str, Enum):
    EMPTY = "empty"
    REPAIR = "repair"
    ADVANCE = "advance"
    IDLE = "idle"


@dataclass
class ReconcileResult:
    transition: Transition
    watermark: Watermark
    new_listings: List[Listing] = field(default_factory=list)

    @property
    def should_persist(self) -> bool:
        return self.transition in (Transition.REPAIR, Transition.ADVANCE)


def reconcile(
    batch: Sequence[Listing],
    watermark: Watermark,
    now: Optional[datetime] = None,
) -> ReconcileResult:
    """Compare a freshly extracted batch against the watermark.

    - empty batch: nothing to do.
    - watermark ahead of every listing (manual reset, earlier bug): repair it
      down to the newest id and notify nothing this run, otherwise it would
      suppress notifications forever.
    - newer listings present: return them oldest first and advance.
    - otherwise idle; the watermark is left untouched and not rewritten.
    """
    if not batch:
        return ReconcileResult(Transition.EMPTY, watermark)

    newest = max(l.id for l in batch)
    checked_at = now or datetime.now(timezone.utc)

    if watermark.last_seen_id > newest:
        return ReconcileResult(
            Transition.REPAIR,
            Watermark(last_seen_id=newest, last_checked_at=checked_at),
        )

    if newest > watermark.last_seen_id:
        fresh = sorted(
            (l for l in batch if l.id > watermark.last_seen_id), key=lambda l: l.id
        )
        return ReconcileResult(
            Transition.ADVANCE,
            Watermark(last_seen_id=newest, last_checked_at=checked_at),
            fresh,
        )

    return ReconcileResult(Transition.IDLE, watermark)
