from __future__ import annotations

import logging
import sys


class SnippetLogFormatter(logging.Formatter):
    """Formatter that cuts oversized messages down to a snippet.

    Upstream error bodies and header dumps can be several kilobytes; this keeps
    scheduled-job logs readable while leaving normal records untouched.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, max_chars: int = 2000) -> None:
        super().__init__(fmt or "%(asctime)s [%(name)s] %(levelname)s: %(message)s", datefmt)
        self.max_chars = max_chars

    def formatMessage(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        message = record.message
        if len(message) > self.max_chars:
            cut = len(message) - self.max_chars
            record.message = f"{message[: self.max_chars]}... [{cut} chars truncated]"
        try:
            return super().formatMessage(record)
        finally:
            record.message = message


def configure_logging(level: int = logging.INFO) -> None:
    root = logging.getLogger()
    if not any(isinstance(h.formatter, SnippetLogFormatter) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(SnippetLogFormatter())
        root.addHandler(handler)
    root.setLevel(level)
