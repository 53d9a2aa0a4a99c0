"""
ISS LOC Sync

Publishes the ISS position as a DNS LOC record, refreshed on a fixed interval.

Usage:
    python -m iss_loc [--once] [--interval SECONDS] [--log-level LEVEL] [--json-logs]

Environment:
    ZONE_ID, RECORD_NAME, CLOUDFLARE_DNS_API_TOKEN (required); see config.py
    for the optional variables.
"""

import argparse
import logging
import os
import signal
import sys
from typing import List, Optional

from config import SyncConfig
from iss_loc.errors import ConfigurationError
from iss_loc.scheduler import Scheduler
from logging_config import configure_logging, get_logger

logger = get_logger(__name__)

EX_CONFIG = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="iss_loc",
        description="Publish the ISS position as a DNS LOC record",
    )
    parser.add_argument("--once", action="store_true", help="Run a single sync and exit")
    parser.add_argument("--interval", type=int, help="Seconds between syncs (overrides UPDATE_INTERVAL)")
    parser.add_argument("--log-level", help="Logging level (overrides LOG_LEVEL)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, environ=None) -> int:
    args = parse_args(argv)
    try:
        config = SyncConfig.from_env(os.environ if environ is None else environ)
    except ConfigurationError as e:
        logger.error(str(e))
        return EX_CONFIG

    if args.interval is not None:
        config.update_interval = args.interval
    if args.log_level:
        config.log_level = args.log_level.upper()

    configure_logging(
        level=getattr(logging, config.log_level, logging.INFO),
        json_output=args.json_logs or config.log_format == "json",
    )

    try:
        config.validate()
    except ConfigurationError as e:
        logger.error(str(e))
        return EX_CONFIG

    scheduler = Scheduler(config)

    if args.once:
        return 0 if scheduler.run_cycle() is not None else 1

    def graceful_shutdown(signum, _frame) -> None:
        logger.info("signal received", signal=signal.Signals(signum).name)
        scheduler.stop()

    for signame in ("SIGINT", "SIGTERM"):
        signal.signal(getattr(signal, signame), graceful_shutdown)

    scheduler.run_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
