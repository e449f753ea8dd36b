"""
Job detail fetcher: downloads one job page and extracts a Job from it.
"""

import logging
from typing import Optional, Tuple

import httpx
from bs4 import BeautifulSoup

from . import config
from .errors import FetchFailure
from .models import Job
from .parser import parse_job_details

logger = logging.getLogger(__name__)


def fetch_page(
    url: str,
    user_agent: str = config.USER_AGENT,
    timeout_ms: int = config.TIMEOUT_MS,
    client: Optional[httpx.Client] = None,
) -> Tuple[str, str]:
    """
    Fetch a job page.

    Returns:
        (HTML, final URL after redirects)

    Raises:
        FetchFailure: On connection errors, timeouts and non-2xx responses
    """
    headers = {"User-Agent": user_agent}
    timeout = timeout_ms / 1000

    try:
        if client is not None:
            response = client.get(url, headers=headers, timeout=timeout, follow_redirects=True)
        else:
            with httpx.Client(headers=headers, timeout=timeout, follow_redirects=True) as own_client:
                response = own_client.get(url)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        raise FetchFailure(f"Timeout after {timeout_ms}ms for {url}") from e
    except httpx.HTTPStatusError as e:
        raise FetchFailure(f"HTTP {e.response.status_code} for {url}") from e
    except httpx.HTTPError as e:
        raise FetchFailure(f"HTTP error for {url}: {e}") from e

    return response.text, str(response.url)


def fetch_job(
    job_url: str,
    user_agent: str = config.USER_AGENT,
    timeout_ms: int = config.TIMEOUT_MS,
    client: Optional[httpx.Client] = None,
) -> Job:
    """
    Download a job page and extract its record (without id and tags).

    Raises:
        FetchFailure: If the page could not be downloaded
    """
    logger.info(f"Fetching job page: {job_url}")
    html, final_url = fetch_page(job_url, user_agent=user_agent, timeout_ms=timeout_ms, client=client)

    soup = BeautifulSoup(html, 'html.parser')
    job = parse_job_details(soup, job_url, base_url=final_url)

    logger.info(f"Parsed job: {job_url} (position='{job.position_name}')")
    return job
