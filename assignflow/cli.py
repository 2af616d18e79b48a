"""
Assignflow CLI
==============

Runs the producer -> consumer scenario once and exits.

Usage:
    assignflow                              # Built-in batch, no produce delay
    assignflow --delay 0.5                  # Pause 0.5s after each push
    assignflow --idle-wait 0.2              # Consumer re-checks at least every 0.2s
    assignflow --items items.json           # Produce items from a JSON file
    assignflow --loglevel debug

Exit codes: 0 on completion, 1 on a fatal error, 130 if cancelled.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import LOG_LEVELS, load_items, load_settings
from .coordinator import Coordinator
from .errors import AssignflowError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assignflow",
        description="Produce assignments into a priority queue and consume them in order",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds the producer pauses after each push (default: AF_PRODUCE_DELAY or 0)",
    )
    parser.add_argument(
        "--idle-wait",
        type=float,
        default=None,
        help="Max seconds the consumer waits on an empty queue (default: AF_IDLE_WAIT or 1)",
    )
    parser.add_argument(
        "--items",
        default=None,
        metavar="FILE",
        help="JSON file with items to produce (default: AF_ITEMS_FILE or built-in batch)",
    )
    parser.add_argument(
        "--loglevel",
        default=None,
        choices=LOG_LEVELS,
        help="Log level (default: AF_LOG_LEVEL or info)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run one producer/consumer exchange."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            produce_delay=args.delay,
            idle_wait=args.idle_wait,
            log_level=args.loglevel,
            items_file=args.items,
        )
    except ValueError as e:
        print(f"Error: invalid settings: {e}", file=sys.stderr)
        return 1

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    logger = logging.getLogger("assignflow.cli")

    try:
        items = load_items(settings.items_file) if settings.items_file else None
        if items is not None:
            logger.info("Loaded %d item(s) from %s", len(items), settings.items_file)

        coordinator = Coordinator(
            items=items,
            produce_delay=settings.produce_delay,
            idle_wait=settings.idle_wait,
        )
        report = coordinator.run()
    except AssignflowError as e:
        logger.error("Run failed: %s", e)
        return 1

    if report.status == "cancelled":
        logger.warning(
            "Cancelled: %d produced, %d consumed", report.produced, report.consumed
        )
        return 130

    print("All assignments produced and consumed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
