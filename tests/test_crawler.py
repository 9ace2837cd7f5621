from __future__ import annotations

import pytest

import hotdeal_agent.services.crawler as crawler
from hotdeal_agent.config import AgentConfig
from hotdeal_agent.services.extractor import BoardExtractor
from hotdeal_agent.services.fetcher import BoardFetcher, FetchError


MARKUP = '<ul><li class="li"><h3 class="title"><a href="/42">Deal</a></h3></li></ul>'


class FlakyFetcher(BoardFetcher):
    def __init__(self, config: AgentConfig, failures: int) -> None:
        super().__init__(config)
        self.failures = failures
        self.calls = 0

    def fetch_board_markup(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise FetchError(f"attempt {self.calls} failed", status_code=503)
        return MARKUP


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    recorded: list[float] = []
    monkeypatch.setattr(crawler.time, "sleep", recorded.append)
    return recorded


def test_crawl_with_retry_recovers(sleeps: list[float]) -> None:
    cfg = AgentConfig(max_retries=3, retry_delay_secs=2)
    fetcher = FlakyFetcher(cfg, failures=2)

    listings = crawler.crawl_with_retry(fetcher, BoardExtractor(cfg))

    assert [l.id for l in listings] == [42]
    assert fetcher.calls == 3
    assert sleeps == [2, 2]


def test_crawl_with_retry_reraises_last_error(sleeps: list[float]) -> None:
    cfg = AgentConfig(max_retries=3, retry_delay_secs=1)
    fetcher = FlakyFetcher(cfg, failures=10)

    with pytest.raises(FetchError, match="attempt 3 failed"):
        crawler.crawl_with_retry(fetcher, BoardExtractor(cfg))
    assert fetcher.calls == 3
    assert sleeps == [1, 1]
