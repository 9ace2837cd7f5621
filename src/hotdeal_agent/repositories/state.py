from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from hotdeal_agent.models import Watermark


logger = logging.getLogger(__name__)


class StateError(Exception):
    """The state file could not be written."""


class JsonStateStore:
    """Watermark persisted as a single JSON document, overwritten on every save."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Watermark:
        """Read the watermark; a missing or unreadable file yields the default.

        Falling back re-notifies listings already seen, which is preferred to
        silently losing notifications.
        """
        if not self.path.exists():
            logger.info("No state file at %s, starting from 0", self.path)
            return Watermark()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            watermark = Watermark.model_validate(data)
        except (OSError, ValueError, ValidationError) as exc:
            logger.error("Failed to load state file %s: %s", self.path, exc)
            return Watermark()
        logger.info("Last seen listing id: %d", watermark.last_seen_id)
        return watermark

    def save(self, watermark: Watermark) -> None:
        payload = watermark.model_dump(mode="json", by_alias=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except OSError as exc:
            logger.error("Failed to save state file %s: %s", self.path, exc)
            raise StateError(f"Could not write {self.path}: {exc}") from exc
        logger.info("Saved state: last seen listing id = %d", watermark.last_seen_id)
