# main.py

"""Entry point for the price_scout command-line aggregator."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.sites import supported_countries

logger = logging.getLogger("price_scout.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    countries = ", ".join(supported_countries())

    parser = argparse.ArgumentParser(
        prog="price_scout",
        description="Multi-site, multi-country product price aggregator.",
        epilog=f"Supported countries: {countries}",
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Product search query.",
    )
    parser.add_argument(
        "-c",
        "--country",
        default="US",
        help="ISO-2 country code (default: US).",
    )
    parser.add_argument(
        "--min-price",
        type=float,
        default=None,
        dest="min_price",
        help="Minimum price (USD).",
    )
    parser.add_argument(
        "--max-price",
        type=float,
        default=None,
        dest="max_price",
        help="Maximum price (USD).",
    )
    parser.add_argument(
        "-n",
        "--max-results",
        type=int,
        default=None,
        dest="max_results",
        help="Maximum number of results (default: 20).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--supported",
        action="store_true",
        default=False,
        help="List supported countries and their sites.",
    )
    parser.add_argument(
        "--test-site",
        default=None,
        dest="test_site",
        metavar="NAME",
        help="Run the fetch strategy against a single site.",
    )
    parser.add_argument(
        "--compare",
        nargs="?",
        const="",
        default=None,
        metavar="CODES",
        help="Compare prices across countries (default: US,IN,GB).",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on catalog sites.",
    )
    return parser


def main() -> None:
    """Route to the requested CLI operation."""
    log_file = setup_logging()
    logger.info("price_scout starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    from src.cli import runner

    if args.supported:
        exit_code = runner.run_supported()
    elif args.health:
        exit_code = asyncio.run(runner.run_health_check(None))
    elif args.query is None:
        parser.print_help(sys.stderr)
        exit_code = runner.EXIT_CLIENT_ERROR
    elif args.test_site:
        exit_code = asyncio.run(
            runner.run_test_site(args.test_site, args.query, args.country)
        )
    elif args.compare is not None:
        exit_code = asyncio.run(
            runner.run_compare(args.query, args.compare or None)
        )
    else:
        exit_code = asyncio.run(
            runner.cli_search(
                query=args.query,
                country=args.country,
                min_price=args.min_price,
                max_price=args.max_price,
                max_results=args.max_results,
                output_format=args.output_format,
            )
        )
    logger.info("price_scout exiting with code %d", exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
