import httpx
import pytest

from techstars_scraper.detail_fetcher import fetch_job, fetch_page
from techstars_scraper.errors import FetchFailure

from conftest import load_fixture

JOB_URL = "https://jobs.techstars.com/jobs/abc-123"


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_fetch_job_parses_page():
    seen = {}

    def handler(request):
        seen["user_agent"] = request.headers["User-Agent"]
        seen["url"] = str(request.url)
        return httpx.Response(200, text=load_fixture("job_detail.html"))

    with _client(handler) as client:
        job = fetch_job(JOB_URL, user_agent="test-agent/1.0", client=client)

    assert seen == {"user_agent": "test-agent/1.0", "url": JOB_URL}
    assert job.job_page_url == JOB_URL
    assert job.position_name == "Data Scientist"
    assert job.posted_date_unix == 1709510400


def test_not_found_raises_fetch_failure():
    with _client(lambda request: httpx.Response(404, text="gone")) as client:
        with pytest.raises(FetchFailure, match="HTTP 404"):
            fetch_page(JOB_URL, client=client)


def test_server_error_raises_fetch_failure():
    with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(FetchFailure, match="HTTP 503"):
            fetch_job(JOB_URL, client=client)


def test_timeout_raises_fetch_failure():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with _client(handler) as client:
        with pytest.raises(FetchFailure, match="Timeout after 250ms"):
            fetch_page(JOB_URL, timeout_ms=250, client=client)


def test_connection_error_raises_fetch_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(FetchFailure, match="connection refused"):
            fetch_page(JOB_URL, client=client)


def test_redirect_followed():
    def handler(request):
        if request.url.path == "/jobs/old":
            return httpx.Response(301, headers={"Location": JOB_URL})
        return httpx.Response(200, text="<html><body><h1>Moved role</h1></body></html>")

    with _client(handler) as client:
        html, final_url = fetch_page("https://jobs.techstars.com/jobs/old", client=client)

    assert "Moved role" in html
    assert final_url == JOB_URL


def test_relative_links_resolve_against_redirect_target():
    page = """
    <html><body><div data-testid="content">
      <h1>Platform Engineer</h1>
      <img data-testid="image" src="logos/initech.png">
      <a type="button" data-testid="button" href="apply">Apply</a>
    </div></body></html>
    """

    def handler(request):
        if request.url.host == "jobs.techstars.com":
            return httpx.Response(302, headers={"Location": "https://careers.initech.example/roles/42/"})
        return httpx.Response(200, text=page)

    with _client(handler) as client:
        job = fetch_job("https://jobs.techstars.com/jobs/initech-42?src=list", client=client)

    assert job.job_page_url == "https://jobs.techstars.com/jobs/initech-42"
    assert job.logo_url == "https://careers.initech.example/roles/42/logos/initech.png"
    assert job.organization_url == "https://careers.initech.example/roles/42/apply"
