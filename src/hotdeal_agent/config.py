from __future__ import annotations

import os
from dataclasses import dataclass


_FALSY = ("0", "false", "False", "no", "None", "")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip() not in _FALSY


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, str(default)))
    except ValueError:
        return default


DEFAULT_SITE_URL = os.environ.get("HOTDEAL_SITE_URL", "https://www.fmkorea.com/")
DEFAULT_BOARD_URL = os.environ.get("HOTDEAL_BOARD_URL", "https://www.fmkorea.com/hotdeal")
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class AgentConfig:
    """Runtime settings shared by the fetcher, notifier and state store."""

    site_url: str = DEFAULT_SITE_URL
    board_url: str = DEFAULT_BOARD_URL
    user_agent: str = os.environ.get("HTTP_USER_AGENT", DEFAULT_USER_AGENT)
    accept_language: str = "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7"
    timeout_secs: float = _env_float("HOTDEAL_TIMEOUT_SECS", 10.0)
    max_retries: int = int(_env_float("HOTDEAL_MAX_RETRIES", 3))
    retry_delay_secs: float = _env_float("HOTDEAL_RETRY_DELAY_SECS", 2.0)
    # Headless browser render (defeats the JS challenge); False selects the
    # plain HTTP cookie-bootstrap path.
    use_browser: bool = _env_bool("HOTDEAL_USE_BROWSER", True)
    render_settle_secs: float = _env_float("HOTDEAL_RENDER_SETTLE_SECS", 3.0)
    network_idle_secs: float = _env_float("HOTDEAL_NETWORK_IDLE_SECS", 0.5)
    viewport: tuple[int, int] = (1920, 1080)
    bootstrap_pause_secs: float = _env_float("HOTDEAL_BOOTSTRAP_PAUSE_SECS", 2.0)
    webhook_url: str = os.environ.get("SLACK_WEBHOOK_URL", "")
    notify_delay_secs: float = _env_float("HOTDEAL_NOTIFY_DELAY_SECS", 0.5)
    state_path: str = os.environ.get("HOTDEAL_STATE_FILE", "state.json")
