from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from hotdeal_agent.config import AgentConfig
from hotdeal_agent.repositories.state import JsonStateStore

from .crawler import crawl_with_retry
from .extractor import BoardExtractor
from .fetcher import BoardFetcher, make_fetcher
from .notifier import SlackNotifier
from .reconciler import Transition, reconcile


logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    transition: Transition
    batch_size: int
    last_seen_id: int
    notified: int = 0
    failed: int = 0
    state_written: bool = False


def run_workflow(
    config: AgentConfig | None = None,
    fetcher: Optional[BoardFetcher] = None,
    store: Optional[JsonStateStore] = None,
    notifier: Optional[SlackNotifier] = None,
    extractor: Optional[BoardExtractor] = None,
) -> RunSummary:
    """One complete poll: crawl, diff against the watermark, notify, persist.

    A failed crawl propagates before anything is sent or written.
    """
    cfg = config or AgentConfig()
    fetcher = fetcher or make_fetcher(cfg)
    store = store or JsonStateStore(cfg.state_path)
    notifier = notifier or SlackNotifier(cfg)
    extractor = extractor or BoardExtractor(cfg)

    logger.info("Workflow started at %s", datetime.now(timezone.utc).isoformat())
    watermark = store.load()
    batch = crawl_with_retry(fetcher, extractor, cfg)

    result = reconcile(batch, watermark)
    summary = RunSummary(
        transition=result.transition,
        batch_size=len(batch),
        last_seen_id=result.watermark.last_seen_id,
    )

    if result.transition is Transition.EMPTY:
        logger.info("No listings on the board")
        return summary
    if result.transition is Transition.REPAIR:
        logger.warning(
            "Stored id %d is ahead of newest listing %d; resetting without notifying",
            watermark.last_seen_id,
            result.watermark.last_seen_id,
        )
    elif result.transition is Transition.ADVANCE:
        logger.info("Found %d new listings", len(result.new_listings))
        report = notifier.notify_all(result.new_listings)
        summary.notified = len(report.sent)
        summary.failed = len(report.failed)
    else:
        logger.info("No new listings since %d", watermark.last_seen_id)

    if result.should_persist:
        store.save(result.watermark)
        summary.state_written = True
    logger.info("Workflow finished: %s", result.transition.value)
    return summary
