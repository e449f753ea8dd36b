"""
Command-line entry point for the Techstars job scraper.

Runs one scrape for a labor function, or serves the HTTP trigger.
"""

import argparse
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from typing import Optional

from . import config
from .api import create_app
from .errors import ScraperError
from .upload_to_sheets import GoogleSheetsUploader
from .techstars_scraper import scrape_by_function
from .upload_to_supabase import InMemoryJobStore, JobStore, SupabaseJobStore, get_supabase_client

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure logging to write to both console and rotating file.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Prevent duplicate handlers if function is called multiple times
    if root.handlers:
        return

    config.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = config.LOG_DIR / "techstars_scraper.log"

    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    # Rotating file handler (max 10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)


def build_store(dry_run: bool) -> JobStore:
    if dry_run:
        logger.info("Dry run mode - using in-memory store")
        return InMemoryJobStore()
    return SupabaseJobStore(get_supabase_client())


def build_sink(dry_run: bool) -> Optional[GoogleSheetsUploader]:
    if dry_run or not config.SHEETS_UPLOAD_ENABLED:
        return None
    return GoogleSheetsUploader()


def run_scrape(args: argparse.Namespace) -> int:
    logger.info("=" * 80)
    logger.info("Techstars Job Scraper")
    logger.info("=" * 80)
    logger.info(f"Base URL: {config.BASE_URL}")
    logger.info(f"Function: {args.function or '(all)'}")
    logger.info(f"Sheets upload: {config.SHEETS_UPLOAD_ENABLED and not args.dry_run}")
    logger.info("")

    start_time = time.time()
    try:
        store = build_store(args.dry_run)
        sink = build_sink(args.dry_run)
        saved = scrape_by_function(
            args.function,
            store,
            sink=sink,
            load_more_clicks=args.load_more_clicks,
            max_scrolls=args.max_scrolls,
            save_html=args.save_html,
        )
    except ScraperError as e:
        logger.error(f"✗ Scrape failed: {e}")
        return 1

    elapsed_time = time.time() - start_time
    logger.info("")
    logger.info("=" * 80)
    logger.info("Scraping Complete")
    logger.info("=" * 80)
    logger.info(f"New jobs saved: {len(saved)}")
    for job in saved:
        logger.info(f"  ✓ {job.id}: {job.position_name} @ {job.organization_title} ({job.job_page_url})")
    logger.info(f"Time taken: {elapsed_time:.1f} seconds")
    return 0


def run_server(args: argparse.Namespace) -> int:
    try:
        store = build_store(args.dry_run)
        sink = build_sink(args.dry_run)
    except ScraperError as e:
        logger.error(f"✗ Startup failed: {e}")
        return 1

    app = create_app(store, sink=sink)
    app.run(host=args.host, port=args.port)
    return 0


def main(argv=None) -> int:
    """Main entry point with command-line argument handling."""
    parser = argparse.ArgumentParser(
        description='Scrape Techstars job postings for a labor function',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape one labor function
  python -m techstars_scraper.main --function "Data Science"

  # Try it without touching Supabase or Sheets
  python -m techstars_scraper.main -f "Software Engineering" --dry-run

  # Serve POST /api/scrape and GET /api/jobs
  python -m techstars_scraper.main --serve --port 8080
        """
    )

    parser.add_argument('--function', '-f', default='', help='Labor function filter (default: all jobs)')
    parser.add_argument('--load-more-clicks', type=int, default=config.LOAD_MORE_CLICKS,
                        help=f'Max "Load more" clicks (default: {config.LOAD_MORE_CLICKS})')
    parser.add_argument('--max-scrolls', type=int, default=config.MAX_SCROLLS,
                        help=f'Max scrolls after loading more (default: {config.MAX_SCROLLS})')
    parser.add_argument('--dry-run', action='store_true', help='Use an in-memory store and skip Sheets upload')
    parser.add_argument('--save-html', action='store_true', help='Save the rendered listing HTML under data/')
    parser.add_argument('--serve', action='store_true', help='Run the HTTP trigger instead of scraping once')
    parser.add_argument('--host', default='127.0.0.1')
    parser.add_argument('--port', type=int, default=8080)
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.serve:
        return run_server(args)
    return run_scrape(args)


if __name__ == "__main__":
    sys.exit(main())
