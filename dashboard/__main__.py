"""
Headless dashboard runner.

Polls a WebPlot server and logs a summary on every update:

    python -m dashboard --url http://localhost:3001

Or summarizes a CSV export instead of polling:

    python -m dashboard --csv measurements.csv
"""

import argparse
import asyncio

from api.config import PollerSettings
from api.shared.logger import get_logger, setup_logging

from .csv_import import load_impedance_csv
from .poller import DashboardState, WebhookPoller
from .summary import format_summary, summarize_state

logger = get_logger("dashboard")


async def _poll_forever(settings: PollerSettings) -> None:
    poller = WebhookPoller(settings.server_url, interval=settings.interval, timeout=settings.timeout)
    poller.subscribe(lambda state: logger.info("%s", format_summary(summarize_state(state))))
    async with poller:
        # Runs until interrupted; leaving the block stops the poller
        await asyncio.Event().wait()


def main() -> None:
    settings = PollerSettings.from_env()

    parser = argparse.ArgumentParser(description="WebPlot headless dashboard")
    parser.add_argument(
        "--url",
        type=str,
        default=settings.server_url,
        help="Webhook server URL (default: http://localhost:3001 or WEBPLOT_SERVER_URL env var)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=settings.interval,
        help="Seconds between polls (default: 2.0 or WEBPLOT_POLL_INTERVAL env var)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.timeout,
        help="Per-request timeout in seconds (default: 10.0 or WEBPLOT_POLL_TIMEOUT env var)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help="Log level (default: INFO or WEBPLOT_LOG_LEVEL env var)",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Summarize a CSV file of raw spectra instead of polling",
    )
    args = parser.parse_args()

    setup_logging(args.log_level)

    if args.csv:
        records = load_impedance_csv(args.csv)
        state = DashboardState(latest=records[-1] if records else None, history=tuple(records))
        logger.info("%s", format_summary(summarize_state(state)))
        return

    settings.server_url = args.url.rstrip("/")
    settings.interval = args.interval
    settings.timeout = args.timeout

    try:
        asyncio.run(_poll_forever(settings))
    except KeyboardInterrupt:
        logger.info("Dashboard stopped")


if __name__ == "__main__":
    main()
