from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import List, Optional

from hashcheck.config import ExporterConfig, load_config
from hashcheck.controller import ProbeScheduler
from hashcheck.errors import ConfigError
from hashcheck.exporter import OnDemandExporter, ScrapeHandler, SnapshotExporter, Watcher
from hashcheck.factory import ProberFactory
from hashcheck.log import setup_logging
from hashcheck.poller import BackgroundProber
from hashcheck.server import serve

DEFAULT_LISTEN = "0.0.0.0:9998"
DEFAULT_CONFIG_PATH = "./hashcheck.yml"

logger = logging.getLogger("hashcheck")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Prometheus exporter checking content hashes of HTTP resources")
    parser.add_argument("--listen", default=DEFAULT_LISTEN, help="The address to listen")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to configuration file")
    parser.add_argument(
        "--mode",
        choices=("watch", "snapshot", "on-demand"),
        default="watch",
        help="watch: keep target state between scrapes; snapshot: fresh state per scrape; "
        "on-demand: probe ?target=&hash= per request (no config file)",
    )
    parser.add_argument("--workers", type=int, default=None, help="Concurrent probes (overrides config)")
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout seconds (overrides config)")
    parser.add_argument(
        "--interval",
        type=float,
        default=0.0,
        help="watch mode: probe every N seconds in the background instead of on each scrape",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging (DEBUG level)")
    return parser


def build_handler(args: argparse.Namespace) -> ScrapeHandler:
    """Build the scrape handler for the selected mode. Raises ConfigError on bad configuration."""
    if args.mode == "on-demand":
        config = ExporterConfig()
    else:
        config = load_config(args.config)

    timeout = args.timeout if args.timeout and args.timeout > 0 else config.timeout
    workers = args.workers if args.workers and args.workers > 0 else config.workers
    scheduler = ProbeScheduler(ProberFactory(timeout=timeout), workers=workers)

    if args.mode == "on-demand":
        return OnDemandExporter(scheduler)
    if args.mode == "snapshot":
        return SnapshotExporter(config.targets, scheduler)
    return Watcher(config.targets, scheduler, interval_driven=args.interval > 0)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.interval < 0:
        parser.error("--interval must not be negative")
    if args.interval > 0 and args.mode != "watch":
        parser.error("--interval is only supported in watch mode")
    setup_logging(verbose=args.verbose)

    try:
        handler = build_handler(args)
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    poller: Optional[BackgroundProber] = None
    poller_thread: Optional[threading.Thread] = None
    if isinstance(handler, Watcher) and handler.interval_driven:
        poller = BackgroundProber(handler, args.interval)
        poller_thread = threading.Thread(target=poller.start, name="poller", daemon=True)
        poller_thread.start()

    try:
        serve(handler, args.listen)
    except (OSError, ValueError) as e:
        logger.error("can't listen on %s: %s", args.listen, e)
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted, shutting down")
    finally:
        if poller is not None:
            poller.stop()
        if poller_thread is not None:
            poller_thread.join()
    return 0


if __name__ == "__main__":
    sys.exit(main())
