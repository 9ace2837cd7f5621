from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from typing import Optional, Sequence

from hotdeal_agent.config import AgentConfig
from hotdeal_agent.services import run_workflow
from hotdeal_agent.utils.log import configure_logging


logger = logging.getLogger("hotdeal_agent")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Send new hot-deal posts to Slack")
    parser.add_argument("--state-file", help="Path to the watermark JSON file")
    parser.add_argument("--webhook-url", help="Slack incoming webhook URL")
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Use the plain HTTP cookie-bootstrap fetch instead of headless Chrome",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    config = AgentConfig()
    if args.state_file:
        config = replace(config, state_path=args.state_file)
    if args.webhook_url:
        config = replace(config, webhook_url=args.webhook_url)
    if args.no_browser:
        config = replace(config, use_browser=False)

    try:
        summary = run_workflow(config)
    except Exception:
        logger.exception("Workflow failed")
        return 1
    logger.info(
        "Done: %s, %d notified, %d failed, last seen id %d",
        summary.transition.value,
        summary.notified,
        summary.failed,
        summary.last_seen_id,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
