"""Slack incoming-webhook delivery, one message per listing."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import requests
from pydantic import BaseModel, Field, ValidationError

from hotdeal_agent.config import AgentConfig
from hotdeal_agent.models import UNKNOWN, Listing


logger = logging.getLogger(__name__)

COLOR = "#36a64f"
FOOTER = "핫딜 알림"
DEFAULT_GLYPH = "🔥"
# Board category -> glyph shown in front of the message title
CATEGORY_GLYPHS = {
    "먹거리": "🍔",
    "SW/게임": "🎮",
    "PC제품": "🖥️",
    "가전제품": "📺",
    "생활용품": "🧴",
    "의류": "👕",
    "세일정보": "🏷️",
    "화장품": "💄",
    "모바일/상품권": "📱",
    "패키지/이용권": "🎫",
    "기타": "📦",
}


class NotifyError(Exception):
    def __init__(self, message: str, listing_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.listing_id = listing_id


class SlackField(BaseModel):
    title: str
    value: str
    short: bool = True


class SlackAction(BaseModel):
    type: str = "button"
    text: str = Field(min_length=1)
    url: str = Field(min_length=1)


class SlackAttachment(BaseModel):
    color: str = COLOR
    title: str = Field(min_length=1)
    title_link: str = Field(min_length=1)
    fields: List[SlackField] = Field(default_factory=list)
    actions: List[SlackAction] = Field(default_factory=list)
    footer: str = FOOTER
    ts: int
    thumb_url: Optional[str] = None


class SlackMessage(BaseModel):
    text: str = Field(min_length=1)
    attachments: List[SlackAttachment]

    def payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


def category_glyph(category: str) -> str:
    cat = (category or "").strip()
    if cat in CATEGORY_GLYPHS:
        return CATEGORY_GLYPHS[cat]
    for key, glyph in CATEGORY_GLYPHS.items():
        if key in cat:
            return glyph
    return DEFAULT_GLYPH


def build_message(listing: Listing, now: Optional[datetime] = None) -> SlackMessage:
    """Build the Slack attachment message for one listing.

    Raises ``pydantic.ValidationError`` when a required field is empty.
    """
    sent_at = now or datetime.now(timezone.utc)
    glyph = category_glyph(listing.category)
    fields = [
        SlackField(title="쇼핑몰", value=listing.shop or UNKNOWN),
        SlackField(title="가격", value=listing.price or UNKNOWN),
        SlackField(title="배송", value=listing.shipping or UNKNOWN),
        SlackField(title="카테고리", value=listing.category or UNKNOWN),
        SlackField(title="시간", value=listing.posted_at or UNKNOWN),
    ]
    attachment = SlackAttachment(
        title=listing.title,
        title_link=listing.url,
        fields=fields,
        actions=[SlackAction(text="게시글 보기", url=listing.url)],
        ts=int(sent_at.timestamp()),
        thumb_url=listing.thumbnail_url or None,
    )
    return SlackMessage(text=f"{glyph} {listing.title}", attachments=[attachment])


@dataclass
class NotifyReport:
    sent: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)


class SlackNotifier:
    def __init__(self, config: AgentConfig | None = None, session: Optional[requests.Session] = None) -> None:
        self.config = config or AgentConfig()
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.config.webhook_url)

    def notify(self, listing: Listing) -> None:
        try:
            message = build_message(listing)
        except ValidationError as exc:
            raise NotifyError(f"Invalid message for listing {listing.id}: {exc}", listing.id) from exc
        try:
            resp = self.session.post(
                self.config.webhook_url,
                json=message.payload(),
                headers={"Content-Type": "application/json"},
                timeout=self.config.timeout_secs,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise NotifyError(f"Slack webhook failed: {exc}", listing.id) from exc
        logger.info("Sent Slack notification for %d: %s", listing.id, listing.title)

    def notify_all(self, listings: Iterable[Listing]) -> NotifyReport:
        """Deliver listings in order, pausing between calls.

        A failed delivery is logged and not retried; later listings still go out.
        """
        report = NotifyReport()
        items = list(listings)
        if not self.enabled:
            logger.warning("SLACK_WEBHOOK_URL is not set; skipping %d notifications", len(items))
            report.skipped = [l.id for l in items]
            return report

        for idx, listing in enumerate(items):
            if idx and self.config.notify_delay_secs:
                time.sleep(self.config.notify_delay_secs)
            try:
                self.notify(listing)
                report.sent.append(listing.id)
            except NotifyError as exc:
                logger.error("Notification for listing %d failed: %s", listing.id, exc)
                report.failed.append(listing.id)
        return report
