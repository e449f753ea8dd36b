"""
Techstars Job Scraper

Scrapes job postings from https://jobs.techstars.com/jobs for one labor
function filter:

1. Renders the listing in a headless browser, clicks "Load more" and scrolls
   until enough postings are on the page
2. Collects each posting's job link and tags
3. Downloads every job page and extracts a Job
4. Saves jobs whose URL isn't stored yet
5. Optionally appends the newly saved jobs to Google Sheets
"""

import logging
import re
from datetime import datetime
from typing import Callable, List, Optional

from . import config
from .browser import ListingSession, PlaywrightListingSession
from .detail_fetcher import fetch_job
from .errors import AcquisitionFailure, FetchFailure, PersistFailure, SinkFailure
from .models import Job, ListingPage
from .parser import build_list_url, parse_search_results
from .upload_to_sheets import GoogleSheetsUploader
from .upload_to_supabase import JobStore

logger = logging.getLogger(__name__)


def _save_search_html(html: str, url: str) -> None:
    config.SEARCH_HTML_DIR.mkdir(parents=True, exist_ok=True)
    slug = re.sub(r'[^a-z0-9]+', '_', url.lower()).strip('_')[-80:]
    path = config.SEARCH_HTML_DIR / f"search_{slug}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.html"
    with open(path, 'w', encoding='utf-8') as f:
        f.write(html)
    logger.info(f"Saved listing HTML to {path}")


def click_load_more(session: ListingSession, timeout_ms: int) -> bool:
    """
    Click "Load more" once and wait for new postings.

    Returns:
        True if the posting count grew, False if the button or growth never came
    """
    before = session.count(config.JOB_POSTING_SELECTOR)
    if not session.click(config.LOAD_MORE_SELECTOR, timeout_ms):
        logger.info("Load more button not clickable")
        return False
    return session.wait_for_count_growth(config.JOB_POSTING_SELECTOR, before, timeout_ms)


def scroll_for_more(session: ListingSession, timeout_ms: int) -> bool:
    """Scroll to the bottom once and wait for new postings."""
    previous = session.count(config.JOB_POSTING_SELECTOR)
    session.scroll_bottom()
    return session.wait_for_count_growth(config.JOB_POSTING_SELECTOR, previous, timeout_ms)


def acquire_listing(
    url: str,
    load_more_clicks: int = config.LOAD_MORE_CLICKS,
    max_scrolls: int = config.MAX_SCROLLS,
    user_agent: str = config.USER_AGENT,
    wait_timeout_ms: int = config.WAIT_TIMEOUT,
    session_factory: Callable[..., ListingSession] = PlaywrightListingSession,
    save_html: bool = False,
) -> ListingPage:
    """
    Render the listing page and expand it to show more postings.

    The site shows a "Load more" button for the first expansion only; after
    that new postings arrive on scroll. Each phase stops at the first wait in
    which the posting count doesn't grow.

    Raises:
        AcquisitionFailure: If no posting appears, or the page source is empty
    """
    logger.info(f"Loading listing: {url}")

    with session_factory(user_agent=user_agent) as session:
        session.open(url)

        if not session.wait_for_selector(config.JOB_POSTING_SELECTOR, wait_timeout_ms):
            raise AcquisitionFailure(f"No job postings appeared within {wait_timeout_ms}ms for URL: {url}")

        session.hide_element(config.COOKIE_BANNER_ID)

        for i in range(load_more_clicks):
            if not click_load_more(session, wait_timeout_ms):
                logger.info(f"Load more stopped after {i} click(s)")
                break

        for s in range(max_scrolls):
            if not scroll_for_more(session, wait_timeout_ms):
                logger.info(f"Scrolling stopped after {s} scroll(s)")
                break

        logger.info(f"Postings on page: {session.count(config.JOB_POSTING_SELECTOR)}")

        html = session.html()
        if not html:
            raise AcquisitionFailure(f"Page source is empty for URL: {url}")

    if save_html:
        _save_search_html(html, url)

    return ListingPage(html=html, base_url=url)


def save_if_new(store: JobStore, job: Job, tags: List[str]) -> Optional[Job]:
    """
    Insert the job unless its URL is already stored.

    Returns:
        The saved job with its id, or None for a duplicate
    """
    if store.find_by_job_page_url(job.job_page_url):
        logger.debug(f"Job already exists in store: {job.job_page_url}")
        return None

    job.tags = ", ".join(tags)
    return store.save(job)


def _check_labor_function(job: Job, tags: List[str]) -> None:
    # The labor function is read by sibling position, so a reordered page
    # can hand back a tag instead
    if job.labor_function and job.labor_function in tags:
        logger.warning(
            f"Labor function '{job.labor_function}' is also a listing tag for {job.job_page_url}; "
            f"page layout may have changed"
        )


def fetch_and_save_jobs(
    job_tags: dict,
    store: JobStore,
    fetch: Callable[[str], Job] = fetch_job,
) -> List[Job]:
    """
    Fetch every listed job and save the new ones, in listing order.

    A job that fails to download or save is logged and skipped.
    """
    saved: List[Job] = []
    total = len(job_tags)

    for i, (job_url, tags) in enumerate(job_tags.items(), 1):
        try:
            job = fetch(job_url)
            _check_labor_function(job, tags)

            saved_job = save_if_new(store, job, tags)
            if saved_job is not None:
                saved.append(saved_job)
                logger.info(f"[{i}/{total}] ✓ Saved job {saved_job.id} (source url {job_url})")
        except (FetchFailure, PersistFailure) as e:
            logger.warning(f"[{i}/{total}] ✗ Failed to fetch/save job at {job_url}: {e}")
        except Exception as e:
            logger.warning(f"[{i}/{total}] ✗ Unexpected error for job at {job_url}: {e}", exc_info=True)

    return saved


def scrape_by_function(
    job_function: Optional[str],
    store: JobStore,
    sink: Optional[GoogleSheetsUploader] = None,
    base_url: str = config.BASE_URL,
    load_more_clicks: int = config.LOAD_MORE_CLICKS,
    max_scrolls: int = config.MAX_SCROLLS,
    acquire: Callable[..., ListingPage] = acquire_listing,
    fetch: Callable[[str], Job] = fetch_job,
    save_html: bool = False,
) -> List[Job]:
    """
    Run one scrape for a labor function.

    Args:
        job_function: Listing filter value, or None/blank for all jobs
        store: Where jobs are looked up and saved
        sink: Spreadsheet to mirror new jobs to; None when upload is disabled

    Returns:
        Jobs newly saved by this scrape, in listing order

    Raises:
        AcquisitionFailure: If the listing could not be rendered
        SinkFailure: If the spreadsheet append failed (jobs stay saved)
    """
    with store.transaction(no_rollback_for=(SinkFailure,)):
        url = build_list_url(base_url, job_function)
        listing = acquire(url, load_more_clicks=load_more_clicks, max_scrolls=max_scrolls, save_html=save_html)

        job_tags = parse_search_results(listing.html, listing.base_url)
        logger.info(f"Found {len(job_tags)} job links for function '{job_function or ''}'")

        saved = fetch_and_save_jobs(job_tags, store, fetch=fetch)
        logger.info(f"Saved {len(saved)} new jobs out of {len(job_tags)}")

        if saved and sink is not None:
            try:
                sink.append_jobs_to_sheet(saved)
            except Exception as e:
                raise SinkFailure(f"Google Sheets upload failed: {e}") from e

    return saved
