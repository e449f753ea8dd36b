"""
Exceptions raised by the Techstars scraper.

Per-record failures (FetchFailure, PersistFailure) are contained by the
pipeline; the rest abort the scrape and reach the caller.
"""


class ScraperError(Exception):
    """Base class for all scraper errors."""


class AcquisitionFailure(ScraperError):
    """The listing page never showed a job posting, or its source was unavailable."""


class FetchFailure(ScraperError):
    """A job detail page could not be downloaded."""


class PersistFailure(ScraperError):
    """The store rejected or failed an insert."""


class SinkFailure(ScraperError):
    """Appending newly saved jobs to the spreadsheet failed."""


class ConfigError(ScraperError):
    """Required configuration is missing."""
