from __future__ import annotations

import logging
import time
from typing import Optional

from hotdeal_agent.config import AgentConfig
from hotdeal_agent.models import Listing

from .extractor import BoardExtractor, ExtractError
from .fetcher import BoardFetcher, FetchError


logger = logging.getLogger(__name__)


def crawl(fetcher: BoardFetcher, extractor: BoardExtractor) -> list[Listing]:
    """Fetch the board once and extract its listings, newest first."""
    markup = fetcher.fetch_board_markup()
    return extractor.extract(markup)


def crawl_with_retry(
    fetcher: BoardFetcher,
    extractor: BoardExtractor,
    config: AgentConfig | None = None,
) -> list[Listing]:
    """Run ``crawl`` up to ``max_retries`` times with a fixed pause between attempts.

    The last error is re-raised once every attempt has failed.
    """
    cfg = config or fetcher.config
    attempts = max(1, int(cfg.max_retries))
    last_error: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        try:
            return crawl(fetcher, extractor)
        except (FetchError, ExtractError) as exc:
            last_error = exc
            logger.error("Crawl attempt %d/%d failed: %s", attempt, attempts, exc)
            if attempt < attempts:
                logger.info("Retrying in %.1fs", cfg.retry_delay_secs)
                time.sleep(cfg.retry_delay_secs)
    raise last_error or FetchError("Crawl failed")
