"""Data models for scraped listings."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# Placeholder the board itself uses for missing deal info.
UNKNOWN = "알 수 없음"


class Listing(BaseModel):
    """Represents a single hot-deal post from the board."""

    id: int = Field(gt=0)
    title: str = Field(min_length=1)
    url: str = Field(min_length=1)
    author: str = ""
    posted_at: str = ""
    shop: str = UNKNOWN
    price: str = UNKNOWN
    shipping: str = UNKNOWN
    category: str = UNKNOWN
    thumbnail_url: Optional[str] = None
