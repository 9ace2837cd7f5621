"""Listing extraction from the rendered hot-deal board, built on Scrapy selectors."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin, urlparse

from scrapy import Selector
from scrapy.selector import SelectorList

from hotdeal_agent.config import AgentConfig
from hotdeal_agent.models import UNKNOWN, Listing


logger = logging.getLogger(__name__)

NODE_SELECTOR = "li.li"
# Labels of the spans inside .hotdeal_info, mapped to Listing fields
INFO_LABELS = {
    "쇼핑몰:": "shop",
    "가격:": "price",
    "배송:": "shipping",
}

_ID_RE = re.compile(r"/(\d+)")
_VOTE_RE = re.compile(r"-?\d+")
_AUTHOR_PREFIX_RE = re.compile(r"^\s*/\s*")
_CATEGORY_SUFFIX_RE = re.compile(r"\s*/\s*$")


class ExtractError(Exception):
    """The markup could not be loaded as a document."""


class ListingParseError(Exception):
    """A single listing node was malformed."""


@dataclass
class NodeResult:
    """Outcome of parsing one listing node: a listing, a skip reason, or an error."""

    listing: Optional[Listing] = None
    skipped: Optional[str] = None
    error: Optional[ListingParseError] = None


def _text(sel: Selector | SelectorList) -> str:
    if isinstance(sel, Selector):
        sel = SelectorList([sel])
    return "".join(s.xpath("string()").get() or "" for s in sel).strip()


def absolute_url(href: str, base_url: str) -> str:
    """Resolve ``//host/x`` and ``/x`` forms against the site origin."""
    href = href.strip()
    if href.startswith("//"):
        scheme = urlparse(base_url).scheme or "https"
        return f"{scheme}:{href}"
    return urljoin(base_url, href)


def parse_vote(text: str) -> int:
    m = _VOTE_RE.search(text or "")
    try:
        return int(m.group(0)) if m else 0
    except ValueError:
        return 0


class BoardExtractor:
    """Turn board markup into listings sorted newest first."""

    def __init__(self, config: AgentConfig | None = None) -> None:
        self.config = config or AgentConfig()

    def _info_fields(self, node: Selector) -> dict[str, str]:
        found: dict[str, str] = {}
        for span in node.css(".hotdeal_info span"):
            label_text = _text(span)
            for label, field_name in INFO_LABELS.items():
                if label in label_text and field_name not in found:
                    found[field_name] = _text(span.css("a.strong"))
                    break
        return {name: found.get(name) or UNKNOWN for name in INFO_LABELS.values()}

    def parse_node(self, node: Selector) -> NodeResult:
        try:
            link = node.css("h3.title a")
            title = _text(link.css(".ellipsis-target")) or _text(link)

            href = (link.attrib.get("href") or "").strip()
            if not href:
                return NodeResult(skipped="no-url")
            url = absolute_url(href, self.config.site_url)

            m = _ID_RE.search(urlparse(url).path)
            if not m:
                return NodeResult(skipped="no-id")
            number = int(m.group(1))
            if number <= 0:
                return NodeResult(skipped="no-id")

            # Downvoted deals are dropped entirely
            if parse_vote(_text(node.css(".count")[:1])) <= -1:
                return NodeResult(skipped="downvoted")
            if not title:
                return NodeResult(skipped="no-title")

            author = _AUTHOR_PREFIX_RE.sub("", _text(node.css(".author"))).strip()
            category = _CATEGORY_SUFFIX_RE.sub("", _text(node.css(".category a")))
            thumb = (node.css("img.thumb::attr(src)").get() or "").strip()

            listing = Listing(
                id=number,
                title=title,
                url=url,
                author=author,
                posted_at=_text(node.css(".regdate")),
                category=category or UNKNOWN,
                thumbnail_url=absolute_url(thumb, self.config.site_url) if thumb else None,
                **self._info_fields(node),
            )
        except Exception as exc:
            return NodeResult(error=ListingParseError(str(exc)))
        return NodeResult(listing=listing)

    def extract(self, markup: str) -> list[Listing]:
        """Parse every listing node; malformed nodes are logged and skipped."""
        if not isinstance(markup, str):
            raise ExtractError(f"Expected markup text, got {type(markup).__name__}")
        try:
            doc = Selector(text=markup)
        except (TypeError, ValueError) as exc:
            raise ExtractError(f"Unparseable board markup: {exc}") from exc

        by_id: dict[int, Listing] = {}
        skipped = failed = 0
        for idx, node in enumerate(doc.css(NODE_SELECTOR)):
            result = self.parse_node(node)
            if result.listing is not None:
                # pinned posts can repeat a listing further down the page
                by_id.setdefault(result.listing.id, result.listing)
            elif result.error is not None:
                failed += 1
                logger.warning("Listing node %d could not be parsed: %s", idx, result.error)
            else:
                skipped += 1
                logger.debug("Listing node %d skipped (%s)", idx, result.skipped)

        listings = sorted(by_id.values(), key=lambda l: l.id, reverse=True)
        logger.info(
            "Extracted %d listings (%d skipped, %d failed)", len(listings), skipped, failed
        )
        return listings
