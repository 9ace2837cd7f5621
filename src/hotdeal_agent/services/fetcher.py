"""Board page retrieval: headless browser render or plain HTTP with cookies."""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Iterable, Optional

import requests

from hotdeal_agent.config import AgentConfig


logger = logging.getLogger(__name__)

ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,image/apng,*/*;q=0.8"
)
# Chrome flags needed to run inside CI containers
BROWSER_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
)
SNIPPET_CHARS = 1000

_COOKIE_PAIR = re.compile(r"^\s*([^=;]+=[^;]+)")


class FetchError(Exception):
    """The board page could not be retrieved."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body_snippet: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet


class BoardFetcher:
    def __init__(self, config: AgentConfig) -> None:
        self.config = config

    def fetch_board_markup(self) -> str:
        raise NotImplementedError


class BrowserFetcher(BoardFetcher):
    """Render the board in headless Chrome and return the final DOM.

    The upstream fingerprints non-browser clients and serves a JS challenge,
    so this is the reliable path. The driver is always quit before returning.
    """

    def _launch_driver(self) -> Any:
        from selenium import webdriver  # type: ignore[import-not-found]
        from selenium.webdriver.chrome.options import Options  # type: ignore[import-not-found]

        options = Options()
        options.add_argument("--headless=new")
        for arg in BROWSER_ARGS:
            options.add_argument(arg)
        width, height = self.config.viewport
        options.add_argument(f"--window-size={width},{height}")
        options.add_argument(f"--user-agent={self.config.user_agent}")
        options.add_argument("--lang=" + self.config.accept_language.split(",")[0])
        return webdriver.Chrome(options=options)

    def _network_idle(self):
        """Wait condition: document complete and no new resource entries for a while."""
        seen = {"count": -1, "since": time.monotonic()}

        def idle(driver: Any) -> bool:
            ready = driver.execute_script("return document.readyState") == "complete"
            count = driver.execute_script(
                "return performance.getEntriesByType('resource').length"
            )
            now = time.monotonic()
            if count != seen["count"]:
                seen["count"] = count
                seen["since"] = now
                return False
            return ready and (now - seen["since"]) >= self.config.network_idle_secs

        return idle

    def fetch_board_markup(self) -> str:
        from selenium.common.exceptions import TimeoutException  # type: ignore[import-not-found]
        from selenium.webdriver.support.ui import WebDriverWait  # type: ignore[import-not-found]

        driver = None
        try:
            logger.info("Launching headless browser")
            driver = self._launch_driver()
            driver.set_page_load_timeout(self.config.timeout_secs)
            driver.execute_cdp_cmd("Network.enable", {})
            driver.execute_cdp_cmd(
                "Network.setExtraHTTPHeaders",
                {"headers": {"Accept": ACCEPT, "Accept-Language": self.config.accept_language}},
            )
            logger.info("Loading %s", self.config.board_url)
            driver.get(self.config.board_url)
            try:
                WebDriverWait(driver, self.config.timeout_secs, poll_frequency=0.1).until(
                    self._network_idle()
                )
            except TimeoutException:
                # ads and beacons can keep polling after the listing has rendered
                logger.warning(
                    "Network never went idle within %.1fs; using the page as rendered",
                    self.config.timeout_secs,
                )
            if self.config.render_settle_secs:
                time.sleep(self.config.render_settle_secs)
            return str(driver.page_source)
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(f"Browser render failed: {exc}") from exc
        finally:
            if driver is not None:
                try:
                    driver.quit()
                except Exception:
                    logger.warning("Browser did not shut down cleanly", exc_info=True)


def extract_cookies(set_cookie_headers: Optional[Iterable[str]]) -> str:
    """Reduce ``Set-Cookie`` headers to a ``Cookie`` request header value.

    Only the leading ``name=value`` of each header is kept; attributes such as
    ``path`` or ``expires`` are dropped.
    """
    pairs: list[str] = []
    for header in set_cookie_headers or []:
        m = _COOKIE_PAIR.match(header or "")
        if m:
            pairs.append(m.group(1).strip())
    return "; ".join(pairs)


def _set_cookie_headers(response: Any) -> list[str]:
    # requests folds repeated headers into one comma-joined value, which is
    # ambiguous with cookie expiry dates; read them from urllib3 instead.
    raw_headers = getattr(getattr(response, "raw", None), "headers", None)
    getlist = getattr(raw_headers, "getlist", None)
    if callable(getlist):
        return [str(h) for h in getlist("Set-Cookie")]
    value = response.headers.get("Set-Cookie")
    return [value] if value else []


class CookieBootstrapFetcher(BoardFetcher):
    """Two-step HTTP fetch: visit the site root for clearance cookies, then the board.

    Any status code is accepted from the transport so error bodies can be
    logged; only a non-200 board response is turned into ``FetchError``.
    """

    def __init__(self, config: AgentConfig, session: Optional[requests.Session] = None) -> None:
        super().__init__(config)
        self.session = session or requests.Session()

    def _base_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Accept": ACCEPT,
            "Accept-Language": self.config.accept_language,
            "Accept-Encoding": "gzip, deflate, br",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "same-origin",
            "Cache-Control": "max-age=0",
        }

    def fetch_board_markup(self) -> str:
        try:
            logger.info("Step 1: visiting %s for cookies", self.config.site_url)
            root = self.session.get(
                self.config.site_url,
                headers={**self._base_headers(), "Referer": "https://www.google.com/"},
                timeout=self.config.timeout_secs,
            )
            logger.info("Root page responded %s", root.status_code)
            cookies = extract_cookies(_set_cookie_headers(root))
            logger.info("Clearance cookies %s", "obtained" if cookies else "missing")

            if self.config.bootstrap_pause_secs:
                time.sleep(self.config.bootstrap_pause_secs)

            headers = {**self._base_headers(), "Referer": self.config.site_url}
            if cookies:
                headers["Cookie"] = cookies
            logger.info("Step 2: fetching %s", self.config.board_url)
            resp = self.session.get(
                self.config.board_url, headers=headers, timeout=self.config.timeout_secs
            )
        except requests.RequestException as exc:
            logger.error("Board request failed: %s", exc)
            raise FetchError(f"Board request failed: {exc}") from exc

        logger.info("Board responded %s", resp.status_code)
        logger.debug("Response headers: %s", dict(resp.headers))
        if resp.status_code != 200:
            snippet = (resp.text or "")[:SNIPPET_CHARS]
            logger.error("HTTP %s from board, body starts: %s", resp.status_code, snippet)
            raise FetchError(
                f"HTTP {resp.status_code}: {getattr(resp, 'reason', '') or ''}".strip(),
                status_code=resp.status_code,
                body_snippet=snippet,
            )
        return str(resp.text)


def make_fetcher(config: AgentConfig | None = None) -> BoardFetcher:
    """Pick the transport strategy from configuration."""
    cfg = config or AgentConfig()
    if cfg.use_browser:
        return BrowserFetcher(cfg)
    return CookieBootstrapFetcher(cfg)
