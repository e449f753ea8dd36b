"""
Job store for scraped Techstars jobs

SupabaseJobStore keeps jobs in the Supabase `jobs` table (see
sql/create_jobs_table.sql). InMemoryJobStore keeps them in process, for dry
runs and tests.
"""

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple, Type

from supabase import create_client, Client

from . import config
from .errors import ConfigError, PersistFailure
from .models import Job

logger = logging.getLogger(__name__)


def get_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> Client:
    """
    Create and return a Supabase client.

    Raises:
        ConfigError: If credentials are not set
    """
    url = url or config.SUPABASE_URL
    key = key or config.SUPABASE_KEY
    if not url or not key:
        raise ConfigError(
            "Supabase credentials not found. Please set SUPABASE_URL and SUPABASE_KEY "
            "environment variables.\n\n"
            "Example:\n"
            "export SUPABASE_URL='https://your-project.supabase.co'\n"
            "export SUPABASE_KEY='your-service-role-key'\n"
        )

    return create_client(url, key)


def job_to_row(job: Job) -> Dict[str, Any]:
    """Flatten a Job into a table row; id is left to the database."""
    row = job.to_dict()
    row.pop("id", None)
    return row


class JobStore:
    """Keyed store of Job records, unique on job_page_url."""

    def find_by_job_page_url(self, job_page_url: str) -> List[Job]:
        raise NotImplementedError

    def save(self, job: Job) -> Job:
        """Insert a job and return it with its assigned id."""
        raise NotImplementedError

    def find_all(self) -> List[Job]:
        raise NotImplementedError

    @contextmanager
    def transaction(self, no_rollback_for: Tuple[Type[BaseException], ...] = ()):
        """Unit of work around a scrape. Stores without transactions just run the block."""
        yield self


class SupabaseJobStore(JobStore):
    """
    Jobs table in Supabase.

    PostgREST commits every request on its own, so transaction() is a plain
    pass-through; the unique index on job_page_url settles concurrent scrapes.
    """

    def __init__(self, client: Client, table: str = config.JOBS_TABLE):
        self.client = client
        self.table = table

    def find_by_job_page_url(self, job_page_url: str) -> List[Job]:
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .eq("job_page_url", job_page_url)
                .execute()
            )
        except Exception as e:
            raise PersistFailure(f"Lookup failed for {job_page_url}: {e}") from e
        return [Job.from_dict(row) for row in response.data or []]

    def save(self, job: Job) -> Job:
        try:
            response = self.client.table(self.table).insert(job_to_row(job)).execute()
        except Exception as e:
            raise PersistFailure(f"Insert failed for {job.job_page_url}: {e}") from e

        if not response.data:
            raise PersistFailure(f"Insert returned no row for {job.job_page_url}")
        return Job.from_dict(response.data[0])

    def find_all(self) -> List[Job]:
        try:
            response = self.client.table(self.table).select("*").order("id").execute()
        except Exception as e:
            raise PersistFailure(f"Listing jobs failed: {e}") from e
        return [Job.from_dict(row) for row in response.data or []]


class InMemoryJobStore(JobStore):
    """Process-local store with sequential ids and rollback on failure."""

    def __init__(self, jobs: Optional[List[Job]] = None):
        self._jobs: Dict[str, Job] = {}
        self._next_id = 1
        for job in jobs or []:
            self.save(job)

    def find_by_job_page_url(self, job_page_url: str) -> List[Job]:
        job = self._jobs.get(job_page_url)
        return [job] if job is not None else []

    def save(self, job: Job) -> Job:
        if job.job_page_url in self._jobs:
            raise PersistFailure(f"Duplicate job_page_url: {job.job_page_url}")
        saved = replace(job, id=self._next_id)
        self._next_id += 1
        self._jobs[saved.job_page_url] = saved
        return saved

    def find_all(self) -> List[Job]:
        return list(self._jobs.values())

    @contextmanager
    def transaction(self, no_rollback_for: Tuple[Type[BaseException], ...] = ()):
        snapshot = dict(self._jobs)
        next_id = self._next_id
        try:
            yield self
        except no_rollback_for:
            raise
        except Exception:
            logger.warning("Rolling back in-memory store")
            self._jobs = snapshot
            self._next_id = next_id
            raise
