from __future__ import annotations

import logging

from hotdeal_agent.utils.log import SnippetLogFormatter


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord("hotdeal_agent", logging.ERROR, __file__, 1, msg, args, None)


def test_long_messages_are_truncated() -> None:
    fmt = SnippetLogFormatter(fmt="%(message)s", max_chars=10)
    out = fmt.format(_record("body: %s", "x" * 50))
    assert out.startswith("body: xxxx...")
    assert "truncated" in out


def test_short_messages_pass_through() -> None:
    fmt = SnippetLogFormatter(fmt="%(levelname)s %(message)s")
    assert fmt.format(_record("HTTP %s", 403)) == "ERROR HTTP 403"
