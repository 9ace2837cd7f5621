"""Data models for board listings and the persisted watermark."""

from .listing import UNKNOWN, Listing
from .state import Watermark

__all__ = ["Listing", "UNKNOWN", "Watermark"]
