from unittest.mock import MagicMock

import pytest

from techstars_scraper.api import create_app
from techstars_scraper.errors import AcquisitionFailure
from techstars_scraper.models import Job
from techstars_scraper.upload_to_supabase import InMemoryJobStore


@pytest.fixture
def store():
    return InMemoryJobStore([Job(job_page_url="https://jobs.techstars.com/jobs/abc-123", position_name="Data Scientist")])


def test_scrape_returns_saved_count(store):
    scrape = MagicMock(return_value=[Job(job_page_url="a"), Job(job_page_url="b")])
    sink = MagicMock()
    client = create_app(store, sink=sink, scrape=scrape).test_client()

    response = client.post("/api/scrape", query_string={"function": "Data Science"})

    assert response.status_code == 200
    assert response.get_json() == {"saved": 2}
    scrape.assert_called_once_with("Data Science", store, sink=sink)


def test_scrape_without_function_scrapes_all(store):
    scrape = MagicMock(return_value=[])
    client = create_app(store, scrape=scrape).test_client()

    response = client.post("/api/scrape")

    assert response.get_json() == {"saved": 0}
    scrape.assert_called_once_with("", store, sink=None)


def test_scrape_failure_returns_500(store):
    scrape = MagicMock(side_effect=AcquisitionFailure("No job postings appeared"))
    client = create_app(store, scrape=scrape).test_client()

    response = client.post("/api/scrape?function=Design")

    assert response.status_code == 500
    assert "No job postings appeared" in response.get_json()["error"]


def test_list_jobs(store):
    client = create_app(store).test_client()

    response = client.get("/api/jobs")

    assert response.status_code == 200
    jobs = response.get_json()
    assert len(jobs) == 1
    assert jobs[0]["id"] == 1
    assert jobs[0]["position_name"] == "Data Scientist"


def test_scrape_requires_post(store):
    client = create_app(store).test_client()
    assert client.get("/api/scrape").status_code == 405
