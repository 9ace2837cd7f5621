from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Watermark(BaseModel):
    """Highest listing id already reported, as stored in the state file.

    The on-disk keys are ``lastPostNumber`` and ``lastCheckTime``.
    """

    model_config = ConfigDict(populate_by_name=True)

    last_seen_id: int = Field(default=0, ge=0, alias="lastPostNumber")
    last_checked_at: Optional[datetime] = Field(default=None, alias="lastCheckTime")
