"""
Parser for Techstars job board pages

Turns the rendered listing page into an ordered map of job links to tags,
and a single job page into a Job record.

Every field of a job page has its own extractor below. The rules follow the
markup of jobs.techstars.com and are expected to need updating when the site
changes; keep them isolated so one can be swapped without touching the rest.
"""

import logging
import re
from calendar import timegm
from datetime import date
from typing import Dict, Iterator, List, Optional
from urllib.parse import quote_plus, urljoin, urlparse

from bs4 import BeautifulSoup, NavigableString, Tag

from . import config
from .models import Job, LocationInfo

logger = logging.getLogger(__name__)

CONTENT_SELECTOR = "[data-testid=content]"
LOGO_SELECTOR = "img[data-testid=image], img[alt]"
COMPANY_LINK_SELECTOR = 'a[href*="/companies/"]'
APPLY_SELECTORS = (
    "a[type=button][data-testid=button]",
    "a[type=button][data-testid=button-apply-now]",
)
CAREER_PAGE_SELECTOR = "[data-testid=careerPage]"

POSTED_PATTERN = re.compile(r"posted", re.IGNORECASE)
DATE_PATTERN = re.compile(r"([A-Za-z]{3,9}\s+\d{1,2},\s+\d{4})")
# "Mar 4, 2024" / "March 4, 2024": English month names, exact case, single spaces
DATE_PARTS_PATTERN = re.compile(r"([A-Za-z]+) (\d{1,2}), (\d{4})")
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
MONTHS = {name: number for number, name in enumerate(MONTH_NAMES, 1)}
MONTHS.update({name[:3]: number for number, name in enumerate(MONTH_NAMES, 1)})

# Elements whose boundaries separate words in rendered text
BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "body", "br", "caption", "center",
    "col", "colgroup", "dd", "details", "dir", "div", "dl", "dt", "fieldset",
    "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6",
    "head", "header", "hgroup", "hr", "html", "li", "main", "menu", "nav", "ol",
    "p", "pre", "section", "summary", "table", "tbody", "td", "tfoot", "th",
    "thead", "title", "tr", "ul",
})

MAX_ORGANIZATION_TITLE_LENGTH = 100
ORGANIZATION_SEARCH_DEPTH = 3


# ============================================================================
# TEXT HELPERS
# ============================================================================

def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace and trim."""
    if not text:
        return ""
    return re.sub(r'\s+', ' ', text).strip()


def _collect_text(element: Tag, parts: List[str]) -> None:
    for child in element.children:
        if type(child) is NavigableString:
            parts.append(str(child))
        elif isinstance(child, Tag):
            block = child.name in BLOCK_TAGS
            if block:
                parts.append(" ")
            _collect_text(child, parts)
            if block:
                parts.append(" ")


def element_text(element: Tag) -> str:
    """
    Visible text of an element and its descendants, whitespace normalized.

    Inline tags join their text to the neighbours as rendered
    ("Data <em>Sci</em>entist" -> "Data Scientist"); block elements and <br>
    separate words.
    """
    parts: List[str] = []
    _collect_text(element, parts)
    return clean_text("".join(parts))


def own_text(element: Tag) -> str:
    """Text of the element's direct text nodes only, descendants excluded."""
    # Exact type check skips comments, doctype and <script>/<style> bodies
    parts = [str(child) for child in element.children if type(child) is NavigableString]
    return clean_text("".join(parts))


def _self_and_select(element: Tag, selector: str) -> List[Tag]:
    """Like element.select(), but the element itself counts when it matches."""
    matches = element.select(selector)
    names = {part.strip() for part in selector.split(",")}
    if element.name in names:
        matches.insert(0, element)
    return matches


def _self_and_descendants(element: Tag, name: str) -> Iterator[Tag]:
    if element.name == name:
        yield element
    yield from element.find_all(name)


# ============================================================================
# URLS
# ============================================================================

def build_list_url(base_url: str, job_function: Optional[str]) -> str:
    """
    Compose the listing URL for a labor function filter.

    Example: ("https://jobs.techstars.com/jobs", "Data Science")
        -> "https://jobs.techstars.com/jobs?filter=Data+Science"
    """
    if job_function is None or not job_function.strip():
        return base_url
    return f"{base_url}?filter={quote_plus(job_function, encoding='utf-8')}"


def clean_link(link: Optional[str]) -> Optional[str]:
    """Strip the query string (everything from the first '?')."""
    if link is None:
        return None
    return link.split('?', 1)[0]


def to_absolute_url(element: Tag, attr: str, base_url: str) -> Optional[str]:
    """
    Resolve a URL attribute of an element to an absolute URL.

    Root-relative values fall back to scheme://host of base_url; anything
    that still can't be resolved is returned as written.
    """
    value = element.get(attr)
    if not value:
        return None

    absolute = urljoin(base_url, value)
    parsed = urlparse(absolute)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return absolute

    if value.startswith('/'):
        base = urlparse(base_url)
        if base.scheme and base.hostname:
            return f"{base.scheme}://{base.hostname}{value}"
    return value


# ============================================================================
# LISTING PAGE
# ============================================================================

def extract_job_url(card: Tag, base_url: str) -> Optional[str]:
    """First link in a posting card that points at a Techstars job page."""
    for link in card.select("a[href]"):
        href = urljoin(base_url, link["href"])
        if "/jobs/" in href and config.JOB_HOST in href:
            return href
    return None


def extract_tags(card: Tag) -> List[str]:
    """Tag texts on a posting card, in card order, empties dropped."""
    tags = []
    for tag_el in card.select(config.TAG_SELECTOR):
        text = element_text(tag_el)
        if text:
            tags.append(text)
    return tags


def parse_search_results(html: str, base_url: str) -> Dict[str, List[str]]:
    """
    Map each posting on the rendered listing to its tags.

    Returns:
        Dict of canonical job URL -> tags, in the order the postings appear
    """
    soup = BeautifulSoup(html, 'html.parser')
    results: Dict[str, List[str]] = {}

    for card in soup.select(config.JOB_POSTING_SELECTOR):
        job_url = extract_job_url(card, base_url)
        if not job_url:
            continue

        link = clean_link(job_url)
        tags = extract_tags(card)
        results[link] = tags
        logger.info(f"Job link found: {link} | Tags: {tags}")

    return results


# ============================================================================
# JOB PAGE
# ============================================================================

def extract_content_element(soup: BeautifulSoup) -> Tag:
    content = soup.select_one(CONTENT_SELECTOR)
    if content is None:
        logger.warning(f"{CONTENT_SELECTOR} not found, falling back to body")
        content = soup.body or soup
    return content


def extract_position_name(content: Tag) -> Optional[str]:
    heading = content.select_one("h1, h2")
    return element_text(heading) if heading else None


def extract_logo_url(content: Tag, base_url: str) -> Optional[str]:
    logo_img = content.select_one(LOGO_SELECTOR)
    return to_absolute_url(logo_img, "src", base_url) if logo_img else None


def extract_organization_title(content: Tag, logo_url: Optional[str]) -> Optional[str]:
    """
    Company name near the logo, else the text of the first /companies/ link.

    Walks up to three ancestors of the logo; at each level the first
    p/span/div (in document order) with short non-empty text wins.
    """
    if logo_url is not None:
        logo_img = content.select_one(LOGO_SELECTOR)
        parent = logo_img.parent if logo_img else None
        for _ in range(ORGANIZATION_SEARCH_DEPTH):
            if parent is None:
                break
            for candidate in _self_and_select(parent, "p, span, div"):
                text = element_text(candidate)
                if text and len(text) <= MAX_ORGANIZATION_TITLE_LENGTH:
                    return text
            parent = parent.parent

    company_link = content.select_one(COMPANY_LINK_SELECTOR)
    return element_text(company_link) if company_link else None


def extract_organization_url(content: Tag, base_url: str) -> Optional[str]:
    """Absolute URL of the apply button."""
    for selector in APPLY_SELECTORS:
        apply_link = content.select_one(selector)
        if apply_link is not None:
            return to_absolute_url(apply_link, "href", base_url)
    return None


def find_posted_date_element(content: Tag) -> Optional[Tag]:
    """First div whose own text mentions 'posted'."""
    for div in _self_and_descendants(content, "div"):
        if POSTED_PATTERN.search(own_text(div)):
            return div
    return None


def find_location_element(content: Tag) -> Optional[Tag]:
    """Nearest sibling before the posted-date div with no digit in its text."""
    posted_el = find_posted_date_element(content)
    if posted_el is None:
        return None

    sibling = posted_el.find_previous_sibling()
    while sibling is not None:
        if not re.search(r'\d', element_text(sibling)):
            return sibling
        sibling = sibling.find_previous_sibling()
    return None


def extract_labor_function(content: Tag) -> Optional[str]:
    """Text of the element right before the location element."""
    location_el = find_location_element(content)
    if location_el is None:
        return None

    labor_function_el = location_el.find_previous_sibling()
    if labor_function_el is None:
        return None
    return element_text(labor_function_el) or None


def parse_location(location_raw: Optional[str]) -> LocationInfo:
    """
    Split a raw location line into city, state and country.

    Examples:
        "Remote" -> country only
        "Berlin, Germany" -> city, country
        "Austin, TX, USA" -> city, state, country
        "Brooklyn, NY, United States, North America"
            -> city, state, "United States, North America"
    """
    if location_raw is None:
        return LocationInfo()

    parts = [part.strip() for part in location_raw.split(',') if part.strip()]
    location = LocationInfo(raw=location_raw)

    if len(parts) == 1:
        location.country = parts[0]
    elif len(parts) == 2:
        location.city, location.country = parts
    elif len(parts) >= 3:
        location.city = parts[0]
        location.state = parts[1]
        location.country = ", ".join(parts[2:])

    return location


def extract_location_info(content: Tag) -> LocationInfo:
    location_el = find_location_element(content)
    location_raw = element_text(location_el) if location_el is not None else None
    return parse_location(location_raw)


def parse_date_to_epoch(date_raw: Optional[str]) -> Optional[int]:
    """
    Find a "Mar 4, 2024" / "March 4, 2024" date in text.

    Returns:
        Epoch seconds of that day's UTC midnight, or None
    """
    if not date_raw:
        return None

    match = DATE_PATTERN.search(date_raw)
    if not match:
        return None

    date_str = match.group(1)
    parts = DATE_PARTS_PATTERN.fullmatch(date_str)
    month = MONTHS.get(parts.group(1)) if parts else None
    if month is None:
        logger.debug(f"Unrecognized date: {date_str}")
        return None

    try:
        posted = date(int(parts.group(3)), month, int(parts.group(2)))
    except ValueError:
        return None
    return timegm(posted.timetuple())



def extract_posted_date_unix(soup: BeautifulSoup, content: Tag) -> Optional[int]:
    posted_el = find_posted_date_element(content)
    posted_raw = None

    if posted_el is not None:
        posted_raw = element_text(posted_el)
    else:
        # No "posted" label; take the first element anywhere holding a date
        for element in soup.find_all(True):
            if DATE_PATTERN.search(own_text(element)):
                posted_raw = element_text(element)
                break

    return parse_date_to_epoch(posted_raw)


def extract_description_html(soup: BeautifulSoup) -> str:
    career = soup.select_one(CAREER_PAGE_SELECTOR)
    return career.decode_contents().strip() if career else ""


def parse_job_details(soup: BeautifulSoup, job_url: str, base_url: Optional[str] = None) -> Job:
    """
    Extract a Job from a parsed job page.

    Relative links resolve against base_url (the address the page was finally
    served from), defaulting to job_url.

    Missing pieces of the page leave the matching fields as None. id and
    tags are left for the store and the listing to fill in.
    """
    content = extract_content_element(soup)
    base_url = base_url or job_url

    logo_url = extract_logo_url(content, base_url)
    job = Job(
        job_page_url=clean_link(job_url),
        position_name=extract_position_name(content),
        organization_url=extract_organization_url(content, base_url),
        logo_url=logo_url,
        organization_title=extract_organization_title(content, logo_url),
        labor_function=extract_labor_function(content),
        posted_date_unix=extract_posted_date_unix(soup, content),
        description_html=extract_description_html(soup),
    )
    job.set_location(extract_location_info(content))
    return job
