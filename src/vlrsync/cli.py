"""CLI entry point for the vlr.gg sync worker.

Provides ``main()`` as the sync entry point for the ``vlr-sync`` console
script, and ``async_main(args)`` which sets up logging, builds the
client and gateway, and runs the selected command.

Usage::

    vlr-sync run --store-url sqlite:///data/vlr.db
    vlr-sync run --store-url https://store.example --api-key ...
    vlr-sync backfill --start-page 1 --max-pages 20

Store URL, API key and webhook URL default to the VLRSYNC_STORE_URL,
VLRSYNC_STORE_API_KEY and VLRSYNC_WEBHOOK_URL environment variables.
"""

import argparse
import asyncio
import logging
import os
import sys
import time

from vlrsync.backfill import run_backfill
from vlrsync.config import SyncConfig
from vlrsync.exceptions import ConfigError
from vlrsync.gateway import open_gateway
from vlrsync.http_client import VLRClient
from vlrsync.logging_config import setup_logging
from vlrsync.notifications import WebhookNotifier
from vlrsync.worker import ShutdownHandler, run_worker

logger = logging.getLogger(__name__)

ENV_STORE_URL = "VLRSYNC_STORE_URL"
ENV_STORE_API_KEY = "VLRSYNC_STORE_API_KEY"
ENV_WEBHOOK_URL = "VLRSYNC_WEBHOOK_URL"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the vlr-sync CLI."""
    parser = argparse.ArgumentParser(
        prog="vlr-sync",
        description="Mirror vlr.gg match listings and match pages into a store",
    )
    parser.add_argument(
        "--store-url",
        type=str,
        default=os.environ.get(ENV_STORE_URL),
        help=f"sqlite:///path.db, a file path, or an http(s) store URL (env {ENV_STORE_URL})",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=os.environ.get(ENV_STORE_API_KEY),
        help=f"API key for an http(s) store (env {ENV_STORE_API_KEY})",
    )
    parser.add_argument(
        "--webhook-url",
        type=str,
        default=os.environ.get(ENV_WEBHOOK_URL),
        help=f"Chat webhook for outage alerts (env {ENV_WEBHOOK_URL})",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default="data",
        help="Directory for logs (default: data)",
    )
    parser.add_argument(
        "--min-delay",
        type=float,
        default=None,
        help="Minimum delay between requests in seconds (default: 0.25)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show DEBUG output on the console",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Scan listings and track live matches until Ctrl+C")
    run.add_argument(
        "--scan-interval",
        type=float,
        default=None,
        help="Seconds between scanner cycles (default: 120)",
    )
    run.add_argument(
        "--tracker-interval",
        type=float,
        default=None,
        help="Seconds between live tracker polls (default: 30)",
    )
    run.add_argument(
        "--max-results",
        type=int,
        default=None,
        help="Max matches per category (live, upcoming, completed) (default: 50)",
    )
    run.add_argument(
        "--detail-concurrency",
        type=int,
        default=None,
        help="Match pages fetched concurrently per scan (default: 4)",
    )

    backfill = sub.add_parser("backfill", help="Walk the results pages and sync past matches")
    backfill.add_argument(
        "--start-page",
        type=int,
        default=1,
        help="First results page (default: 1)",
    )
    backfill.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Stop after this many pages (default: until 3 empty pages)",
    )
    return parser


def build_config(args: argparse.Namespace) -> SyncConfig:
    """Map parsed arguments onto a SyncConfig and validate it.

    Raises:
        ConfigError: On a missing store URL or API key.
    """
    overrides = {
        "store_url": args.store_url,
        "store_api_key": args.api_key,
        "webhook_url": args.webhook_url,
        "data_dir": args.data_dir,
    }
    if args.min_delay is not None:
        overrides["min_delay"] = args.min_delay
    for arg_name, field_name in (
        ("scan_interval", "scan_interval"),
        ("tracker_interval", "tracker_interval"),
        ("max_results", "max_results_per_category"),
        ("detail_concurrency", "detail_concurrency"),
    ):
        value = getattr(args, arg_name, None)
        if value is not None:
            overrides[field_name] = value

    config = SyncConfig(**overrides)
    config.validate()
    return config


async def async_main(args: argparse.Namespace, config: SyncConfig) -> dict:
    """Async entry point: set up components and run the chosen command."""
    shutdown = ShutdownHandler()
    shutdown.install()

    notifier = WebhookNotifier(config.webhook_url, cooldown=config.alert_cooldown)
    gateway = open_gateway(config)
    start_time = time.monotonic()
    results: dict = {}

    try:
        async with VLRClient(config, notifier=notifier) as client:
            if args.command == "backfill":
                results = await run_backfill(
                    client,
                    gateway,
                    config,
                    start_page=args.start_page,
                    max_pages=args.max_pages,
                    shutdown=shutdown.event,
                )
            else:
                scanner = await run_worker(client, gateway, config, shutdown)
                results = {"cycles": scanner.cycles}
    finally:
        await gateway.close()
        shutdown.restore()
        logger.info(
            "%s finished in %.0fs: %s",
            args.command, time.monotonic() - start_time, results,
        )
    return results


def main(argv: list[str] | None = None) -> int:
    """Sync entry point for the vlr-sync console script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ConfigError as exc:
        print(f"vlr-sync: configuration error: {exc}", file=sys.stderr)
        return 2

    log_file = setup_logging(
        data_dir=config.data_dir,
        console_level=logging.DEBUG if args.verbose else logging.INFO,
    )
    logger.info("Starting vlr-sync %s, store=%s, log=%s", args.command, config.store_url, log_file)

    try:
        asyncio.run(async_main(args, config))
    except KeyboardInterrupt:
        pass  # Already handled by ShutdownHandler
    finally:
        logging.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
