"""High-level orchestration for fetching flight prices and producing reports.

Usage patterns:

1. Fetch fresh results for a set of routes, then aggregate:
   farescan --scrape --routes routes.json --start-date 2026-12-01 --end-date 2026-12-07

2. Reuse previously pickled results (default) for faster iteration:
   farescan --by mean --top 5

A routes file is a JSON list of objects with ``city``, ``airport``, ``dest`` and an optional
``comment``.
"""
import argparse
import json
import logging
import pickle
import time
from pathlib import Path
from typing import Sequence

import dacite
import schedule

from farescan.config import settings
from farescan.emailer import send_report
from farescan.logging_config import setup_logging
from farescan.models import Query, RouteDescriptor
from farescan.processing.aggregate import filter_placeholder_rows, find_best_dates, summarize_prices
from farescan.processing.merge import FlightResults
from farescan.processing.report import render_report
from farescan.query import build_batch_queries, date_range, define_query_range
from farescan.scraping.fetch import fetch_flights
from farescan.scraping.playwright_scraper import PlaywrightRenderer


def load_routes(path: Path) -> list[RouteDescriptor]:
    with open(path, "rt", encoding="utf-8") as f:
        rows = json.load(f)
    if not isinstance(rows, list):
        raise ValueError(f"Routes file {path} must hold a JSON list of route objects")
    return [dacite.from_dict(data_class=RouteDescriptor, data=row, config=dacite.Config(strict=True)) for row in rows]


def build_queries(
        start_date: str,
        end_date: str,
        routes_file: Path | None = None,
        origins: Sequence[str] = (),
        dest: str | None = None,
) -> list[Query]:
    if routes_file is not None:
        routes = load_routes(routes_file)
        logging.info("Loaded %d routes from %s", len(routes), routes_file)
        return build_batch_queries(routes, date_range(start_date, end_date))
    if not origins or not dest:
        raise ValueError("Either a routes file or origins and a destination are required")
    return define_query_range(list(origins), dest, start_date, end_date)


def _load_or_scrape(scrape: bool, queries: Sequence[Query] | None) -> FlightResults:
    if scrape:
        if not queries:
            raise ValueError("Nothing to scrape: no queries given")
        logging.info("Fetching %d queries via Playwright", len(queries))
        with PlaywrightRenderer() as renderer:
            results = fetch_flights(queries, renderer, pause=settings.fetch_pause)
        with open(settings.data_pickle, "wb") as f:
            pickle.dump(results, f, pickle.HIGHEST_PROTOCOL)
        logging.info("Saved %s to %s", results, settings.data_pickle)
        return results
    if not settings.data_pickle.exists():
        raise FileNotFoundError(f"Pickle file {settings.data_pickle} not found. Run with --scrape first.")
    with open(settings.data_pickle, "rb") as f:
        logging.info("Loading existing results pickle %s", settings.data_pickle)
        return pickle.load(f)


def run_pipeline(
        queries: Sequence[Query] | None = None,
        scrape: bool = False,
        by: str = "min",
        top: int = 10,
        keep_offers: bool = False,
        currency_symbol: str | None = None,
        email: bool = False,
) -> Path:
    results = _load_or_scrape(scrape, queries)

    flat = filter_placeholder_rows(results.data)
    flat.to_csv(settings.output_csv, index=False)
    logging.info("Flat table written to %s", settings.output_csv)

    price_table = summarize_prices(
        results.data, reducer="offers" if keep_offers else "min", currency_symbol=currency_symbol
    )
    best_dates = find_best_dates(results.data, n=top, by=by)
    html = render_report(price_table, best_dates, results)
    settings.output_html.write_text(html, encoding="utf-8")
    logging.info("Report written to %s", settings.output_html)

    if email:
        send_report(subject="Flight prices", html_body=html, attachments=[settings.output_csv])

    return settings.output_html


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Flight price comparison pipeline")
    # Queries
    p.add_argument("--routes", type=Path, help="JSON file with route descriptors (city, airport, dest, comment)")
    p.add_argument("--origin", nargs="+", default=[], help="Origin airport codes (used without --routes)")
    p.add_argument("--dest", help="Destination airport code (used without --routes)")
    p.add_argument("--start-date", help="YYYY-MM-DD, first departure date")
    p.add_argument("--end-date", help="YYYY-MM-DD, last departure date (inclusive)")
    p.add_argument("--scrape", action="store_true", help="Fetch fresh results instead of using the pickle")
    # Aggregation
    p.add_argument("--by", choices=["mean", "median", "min"], default="min", help="Statistic for ranking dates")
    p.add_argument("--top", type=int, default=10, help="Number of best dates to report")
    p.add_argument("--keep-offers", action="store_true", help="List every offer per day instead of the cheapest")
    p.add_argument("--currency", default=None, help="Currency symbol used to format the price table")
    # Misc
    p.add_argument("--email", action="store_true", help="Send email if credentials configured")
    p.add_argument("--log-level", default="INFO")
    p.add_argument(
        "--schedule-at",
        metavar="HH:MM",
        default=None,
        help="Run the pipeline every day at the given time (e.g. 07:30). "
             "Without this flag the pipeline runs once and exits.",
    )
    return p


def main_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    if args.scrape and not (args.start_date and args.end_date):
        parser.error("--scrape needs --start-date and --end-date")
    if args.scrape and not (args.routes or (args.origin and args.dest)):
        parser.error("--scrape needs --routes or --origin with --dest")

    def _run() -> None:
        queries = None
        if args.scrape:
            queries = build_queries(args.start_date, args.end_date, args.routes, args.origin, args.dest)
        run_pipeline(
            queries=queries,
            scrape=args.scrape,
            by=args.by,
            top=args.top,
            keep_offers=args.keep_offers,
            currency_symbol=args.currency,
            email=args.email,
        )

    if args.schedule_at:
        logging.info("Scheduler started - pipeline will run every day at %s", args.schedule_at)
        schedule.every().day.at(args.schedule_at).do(_run)
        while True:
            try:
                schedule.run_pending()
            except Exception:  # noqa: BLE001
                logging.exception("Scheduled run failed")
            time.sleep(1)
    try:
        _run()
    except Exception:  # noqa: BLE001
        logging.exception("Pipeline failed")
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main_cli())
