"""Main entry point with CLI."""
import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import orjson

from src.auth.session import CookieSession
from src.config import INVOICES_DIR, Config, config
from src.errors import ScraperError
from src.fetch.client import HtmlFetcher
from src.fetch.invoices import InvoiceClient
from src.jobs.runner import ScrapeRunner
from src.logging_conf import setup_logging
from src.metadata.tmdb import TmdbLookup
from src.scrapers.registry import AVAILABLE_CHANNELS, create_scraper
from src.store.export import JsonlExporter

import logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="TV game refund scraper")
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: {config.LOG_LEVEL})",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help=f"Detail pages fetched in parallel (default: {config.CONCURRENCY})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    rules = subparsers.add_parser("rules", help="List the rule documents of a channel")
    rules.add_argument("channel", help=f"One of: {', '.join(AVAILABLE_CHANNELS)}")

    details = subparsers.add_parser("rule-details", help="Parse the refund clause of a rule document")
    details.add_argument("channel", help=f"One of: {', '.join(AVAILABLE_CHANNELS)}")
    details.add_argument("url", help="Rule page or PDF URL")

    games = subparsers.add_parser("games", help="List the active games of a channel")
    games.add_argument("channel", help=f"One of: {', '.join(AVAILABLE_CHANNELS)}")

    run = subparsers.add_parser("run", help="Scrape every channel and export JSONL")
    run.add_argument(
        "--channels",
        nargs="+",
        default=None,
        help=f"Channels to scrape (default: {' '.join(AVAILABLE_CHANNELS)})",
    )
    run.add_argument(
        "--no-export",
        action="store_true",
        help="Don't write JSONL exports",
    )
    run.add_argument(
        "--tmdb",
        action="store_true",
        help="Decorate listings with TMDb ids and posters (needs TMDB_API_KEY)",
    )

    invoices = subparsers.add_parser("invoices", help="List the telecom invoices of a phone number")
    invoices.add_argument("phone", help="Phone number of the account")
    invoices.add_argument(
        "--download",
        action="store_true",
        help=f"Download every invoice PDF to {INVOICES_DIR}",
    )
    invoices.add_argument(
        "--analyze",
        action="store_true",
        help="Detect game fees in the downloaded invoices (implies --download)",
    )

    return parser.parse_args(argv)


def dump(payload) -> None:
    """Print models or plain data as indented JSON on stdout."""
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2, default=_model_default).decode())
    sys.stdout.write("\n")


def _model_default(obj):
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    raise TypeError


async def run_command(args: argparse.Namespace):
    async with HtmlFetcher() as fetcher:
        if args.command == "rules":
            return await create_scraper(args.channel, fetcher).list_rules()

        if args.command == "rule-details":
            return await create_scraper(args.channel, fetcher).get_rule_details(args.url)

        if args.command == "games":
            return await create_scraper(args.channel, fetcher).list_active_games()

        if args.command == "run":
            runner = ScrapeRunner(
                fetcher,
                channels=args.channels,
                metadata_lookup=TmdbLookup(fetcher) if args.tmdb else None,
                exporter=None if args.no_export else JsonlExporter(),
            )
            results = await runner.run()
            return {"summary": runner.metrics.get_summary(), "games": results}

        if args.command == "invoices":
            client = InvoiceClient(fetcher, CookieSession.from_config())
            invoices = await client.fetch_invoices(args.phone)
            if not (args.download or args.analyze):
                return invoices

            report = []
            for invoice in invoices:
                download = await client.download_invoice(invoice)
                entry = {"download": download}
                if args.analyze:
                    entry["fees"] = await client.analyze_invoice(download)
                report.append(entry)
            return report

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    if args.concurrency:
        config.CONCURRENCY = args.concurrency

    try:
        Config.validate(require_session=args.command == "invoices")
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    try:
        result = asyncio.run(run_command(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except ScraperError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(2)

    dump(result)


if __name__ == "__main__":
    main()
