# main.py

"""Entry point for the pricewatch headless CLI."""

import argparse
import logging
import sys

from pricewatch.config.logging_config import setup_logging
from pricewatch.config.settings import Settings

logger = logging.getLogger("pricewatch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    known = ", ".join(s["id"] for s in Settings.KNOWN_SOURCES)

    parser = argparse.ArgumentParser(
        prog="pricewatch",
        description="Marketplace price watchlist and comparison engine.",
        epilog=f"Known sources: {known}",
    )
    parser.add_argument(
        "--db",
        default=None,
        dest="db_path",
        help="SQLite database path (default: PRICEWATCH_DB_PATH or data/).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show INFO messages on stderr for this run.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    comparisons = sub.add_parser(
        "comparisons", help="Show a user's watchlist with alternate prices.",
    )
    comparisons.add_argument("user_id")
    comparisons.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    comparisons.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_dir",
        help="Also save JSON and CSV exports to this directory.",
    )

    for name, help_text in (
        ("watch", "Add a (product, source) listing to a watchlist."),
        ("unwatch", "Remove a (product, source) listing from a watchlist."),
    ):
        mutation = sub.add_parser(name, help=help_text)
        mutation.add_argument("user_id")
        mutation.add_argument("product_id")
        mutation.add_argument("source")

    sub.add_parser("health", help="Check storage connectivity.")
    sub.add_parser("init-db", help="Create the database schema.")
    return parser


def main() -> None:
    """Dispatch the requested sub-command and exit with its status."""
    args = _build_parser().parse_args()
    log_file = setup_logging(verbose=args.verbose, command=args.command)
    logger.info("pricewatch %s starting, log file: %s", args.command, log_file)

    from pricewatch.cli import runner

    try:
        if args.command == "comparisons":
            exit_code = runner.run_comparisons(
                args.user_id,
                args.output_format,
                args.output_dir,
                db_path=args.db_path,
            )
        elif args.command in ("watch", "unwatch"):
            exit_code = runner.run_mutation(
                args.command,
                args.user_id,
                args.product_id,
                args.source,
                db_path=args.db_path,
            )
        elif args.command == "health":
            exit_code = runner.run_health_check(db_path=args.db_path)
        else:
            exit_code = runner.run_init_db(db_path=args.db_path)
    except Exception:
        logger.critical("Fatal error running %s", args.command, exc_info=True)
        raise
    finally:
        logger.info("pricewatch shutting down")

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
