"""
Data models for Techstars job postings
"""

from dataclasses import dataclass, asdict, fields
from typing import Optional, Dict, Any


@dataclass
class LocationInfo:
    """Raw location line and the parts parsed from it"""
    raw: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


@dataclass
class ListingPage:
    """Rendered listing HTML and the URL its links resolve against"""
    html: str
    base_url: str


@dataclass
class Job:
    """
    A single job posting scraped from a Techstars job page.

    job_page_url is the canonical URL (no query string) and is unique in the store.
    id is assigned by the store on insert; tags is attached from the listing card.
    """

    job_page_url: str
    id: Optional[int] = None

    # Position
    position_name: Optional[str] = None
    labor_function: Optional[str] = None

    # Organization
    organization_url: Optional[str] = None  # "Apply" link
    logo_url: Optional[str] = None
    organization_title: Optional[str] = None

    # Location
    location_raw: Optional[str] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None

    # Dates
    posted_date_unix: Optional[int] = None  # UTC midnight, epoch seconds

    # Description
    description_html: str = ""

    # Listing metadata
    tags: Optional[str] = None  # comma-space joined, listing order

    def set_location(self, location: LocationInfo) -> None:
        """Copy a parsed location onto the job."""
        self.location_raw = location.raw
        self.location_city = location.city
        self.location_state = location.state
        self.location_country = location.country

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        """Build a Job from a store row, ignoring columns the model doesn't know."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
