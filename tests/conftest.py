from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from techstars_scraper.browser import ListingSession
from techstars_scraper.errors import PersistFailure
from techstars_scraper.upload_to_supabase import InMemoryJobStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"

LISTING_URL = "https://jobs.techstars.com/jobs?filter=Data+Science"


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


class FakeListingSession(ListingSession):
    """Replays scripted posting counts instead of driving a browser."""

    def __init__(self, has_postings=True, clickable=True, growth=(), html="<html><body></body></html>",
                 initial_count=20):
        self.has_postings = has_postings
        self.clickable = clickable
        self.growth = list(growth)
        self.page_html = html
        self.postings = initial_count if has_postings else 0
        self.opened_url = None
        self.hidden = []
        self.events = []
        self.closed = False

    def open(self, url):
        self.opened_url = url

    def wait_for_selector(self, selector, timeout_ms):
        return self.has_postings

    def count(self, selector):
        return self.postings

    def hide_element(self, element_id):
        self.hidden.append(element_id)

    def click(self, selector, timeout_ms):
        self.events.append("click")
        return self.clickable

    def scroll_bottom(self):
        self.events.append("scroll")

    def wait_for_count_growth(self, selector, previous, timeout_ms):
        grew = self.growth.pop(0) if self.growth else False
        if grew:
            self.postings = previous + 20
        self.events.append("grew" if grew else "stalled")
        return grew

    def html(self):
        return self.page_html

    def close(self):
        self.closed = True


class RecordingStore(InMemoryJobStore):
    """In-memory store that remembers every save attempt."""

    def __init__(self, jobs=None, fail_on=()):
        self.save_calls = []
        self.fail_on = set(fail_on)
        super().__init__(jobs)
        self.save_calls.clear()

    def save(self, job):
        self.save_calls.append(job.job_page_url)
        if job.job_page_url in self.fail_on:
            raise PersistFailure(f"insert rejected for {job.job_page_url}")
        return super().save(job)


@pytest.fixture
def listing_html():
    return load_fixture("listing.html")


@pytest.fixture
def job_detail_soup():
    return BeautifulSoup(load_fixture("job_detail.html"), "html.parser")


@pytest.fixture
def minimal_detail_soup():
    return BeautifulSoup(load_fixture("job_detail_minimal.html"), "html.parser")


@pytest.fixture
def make_session():
    def _make(**kwargs):
        return FakeListingSession(**kwargs)
    return _make
