"""
Configuration for the Techstars job board scraper
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
SEARCH_HTML_DIR = DATA_DIR / "search_html"
LOG_DIR = PROJECT_ROOT / "logs"

# Load environment variables from .env file in project root
load_dotenv(PROJECT_ROOT / ".env")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Base URL for the Techstars job board
BASE_URL = os.getenv("SCRAPE_BASE_URL", "https://jobs.techstars.com/jobs")
JOB_HOST = "jobs.techstars.com"

USER_AGENT = os.getenv(
    "SCRAPE_USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

# Detail page fetch timeout
TIMEOUT_MS = int(os.getenv("SCRAPE_TIMEOUT_MS", "10000"))

# Browser settings
HEADLESS = True
WAIT_TIMEOUT = 15000  # 15 seconds per explicit wait
LOAD_MORE_CLICKS = 1
MAX_SCROLLS = 5

# Selectors on the listing page
JOB_POSTING_SELECTOR = "[itemtype='https://schema.org/JobPosting']"
LOAD_MORE_SELECTOR = "button[data-testid='load-more']"
TAG_SELECTOR = "[data-testid=tag]"
COOKIE_BANNER_ID = "onetrust-policy-text"

# Google Sheets upload
SHEETS_UPLOAD_ENABLED = _env_flag("SCRAPE_GOOGLE_SHEETS_UPLOAD_ENABLED")
SPREADSHEET_ID = os.getenv("GOOGLE_SHEETS_SPREADSHEET_ID", "")
CREDENTIALS_FILE = os.getenv("GOOGLE_SHEETS_CREDENTIALS_FILE", str(PROJECT_ROOT / "credentials.json"))
WORKSHEET_NAME = os.getenv("GOOGLE_SHEETS_WORKSHEET", "Sheet1")

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
# Check for SUPABASE_KEY first, then fall back to SUPABASE_ANON_KEY or SUPABASE_SERVICE_ROLE_KEY
SUPABASE_KEY = os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY")
JOBS_TABLE = os.getenv("SUPABASE_JOBS_TABLE", "jobs")
