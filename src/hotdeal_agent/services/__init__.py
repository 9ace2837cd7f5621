"""Service layer for the hot-deal notifier."""

from .crawler import crawl, crawl_with_retry
from .extractor import BoardExtractor, ExtractError
from .fetcher import BrowserFetcher, CookieBootstrapFetcher, FetchError, make_fetcher
from .notifier import NotifyError, SlackNotifier
from .reconciler import ReconcileResult, Transition, reconcile
from .workflow import RunSummary, run_workflow

__all__ = [
    "BoardExtractor",
    "BrowserFetcher",
    "CookieBootstrapFetcher",
    "ExtractError",
    "FetchError",
    "NotifyError",
    "ReconcileResult",
    "RunSummary",
    "SlackNotifier",
    "Transition",
    "crawl",
    "crawl_with_retry",
    "make_fetcher",
    "reconcile",
    "run_workflow",
]
