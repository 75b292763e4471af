# main.py

"""Entry point for the produce price tracker CLI."""

import argparse
import logging
import sys

from produce_tracker.config.logging_config import setup_logging
from produce_tracker.services.table_view import SORT_FIELDS

logger = logging.getLogger("produce_tracker.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="produce-tracker",
        description="Coop produce price tracker.",
        epilog="With no action flag, prints the current price table.",
    )
    actions = parser.add_mutually_exclusive_group()
    actions.add_argument(
        "--scrape",
        action="store_true",
        default=False,
        help="Fetch today's produce page and rebuild its month.",
    )
    actions.add_argument(
        "--backfill",
        action="store_true",
        default=False,
        help="Rebuild every monthly partition from stored snapshots.",
    )
    actions.add_argument(
        "--rebuild",
        default=None,
        metavar="YYYY-MM",
        help="Rebuild a single month's partition.",
    )
    actions.add_argument(
        "--months",
        action="store_true",
        default=False,
        help="List stored monthly partitions.",
    )
    actions.add_argument(
        "--feed",
        action="store_true",
        default=False,
        help="Show recent arrivals and out-of-stock events.",
    )
    actions.add_argument(
        "--chart",
        nargs="+",
        default=None,
        metavar="NAME",
        help="Export a price-history chart for one or more items.",
    )
    parser.add_argument(
        "--store",
        default=None,
        dest="store_dir",
        help="Snapshot store directory (default: data/store/).",
    )
    parser.add_argument(
        "--secret",
        default=None,
        help="Shared trigger secret (default: $CRON_SECRET).",
    )
    parser.add_argument(
        "--no-browser",
        action="store_false",
        dest="open_browser",
        help="Do not open exported charts in a browser.",
    )
    parser.add_argument(
        "--sort",
        default="name",
        choices=SORT_FIELDS,
        help="Sort the price table by this column (default: name).",
    )
    parser.add_argument(
        "--desc",
        action="store_true",
        default=False,
        help="Sort the price table in descending order.",
    )
    parser.add_argument(
        "--search",
        default=None,
        metavar="TEXT",
        help="Only show items whose name or origin contains TEXT.",
    )
    return parser


def _job_name(args: argparse.Namespace) -> str:
    """Name the run after its action flag, for the log file name."""
    for action in ("scrape", "backfill", "rebuild", "months", "feed", "chart"):
        if getattr(args, action):
            return action
    return "table"


def main() -> None:
    """Route to the requested CLI command."""
    from produce_tracker.cli import runner

    args = _build_parser().parse_args()
    log_file = setup_logging(_job_name(args))
    logger.info("produce_tracker starting, log file: %s", log_file)

    try:
        if args.scrape:
            exit_code = runner.run_scrape(args.secret, args.store_dir)
        elif args.backfill:
            exit_code = runner.run_backfill(args.secret, args.store_dir)
        elif args.rebuild:
            exit_code = runner.run_rebuild(args.rebuild, args.store_dir)
        elif args.months:
            exit_code = runner.run_months(args.store_dir)
        elif args.feed:
            exit_code = runner.run_feed(args.store_dir)
        elif args.chart:
            exit_code = runner.run_chart(
                args.chart, args.store_dir, args.open_browser,
            )
        else:
            exit_code = runner.run_table(
                args.store_dir, args.sort, args.desc, args.search,
            )
    except Exception:
        logger.critical("Fatal error during CLI run", exc_info=True)
        raise

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
