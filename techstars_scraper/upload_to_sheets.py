"""
Append newly saved jobs to a Google Sheet

Uses a service account key (GOOGLE_SHEETS_CREDENTIALS_FILE) shared with the
target spreadsheet (GOOGLE_SHEETS_SPREADSHEET_ID).
"""

import logging
from typing import List, Optional

import gspread
from google.oauth2.service_account import Credentials

from . import config
from .errors import ConfigError
from .models import Job

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

SHEET_HEADER = [
    "ID", "Job URL", "Position", "Organization URL", "Logo URL",
    "Organization Title", "Labor Function", "Location Raw", "City", "State",
    "Country", "Posted Date", "Tags", "Description",
]


def _cell(value) -> str:
    return "" if value is None else str(value)


def job_to_sheet_row(job: Job) -> List[str]:
    """One sheet row per job, columns in SHEET_HEADER order."""
    return [
        _cell(job.id),
        _cell(job.job_page_url),
        _cell(job.position_name),
        _cell(job.organization_url),
        _cell(job.logo_url),
        _cell(job.organization_title),
        _cell(job.labor_function),
        _cell(job.location_raw),
        _cell(job.location_city),
        _cell(job.location_state),
        _cell(job.location_country),
        _cell(job.posted_date_unix),
        _cell(job.tags),
        _cell(job.description_html),
    ]


class GoogleSheetsUploader:
    """Append-only sink writing jobs to the first worksheet of a spreadsheet."""

    def __init__(
        self,
        spreadsheet_id: Optional[str] = None,
        credentials_file: Optional[str] = None,
        worksheet_name: Optional[str] = None,
        worksheet: Optional[gspread.Worksheet] = None,
    ):
        spreadsheet_id = spreadsheet_id if spreadsheet_id is not None else config.SPREADSHEET_ID
        if not spreadsheet_id or not spreadsheet_id.strip():
            raise ConfigError(
                "Google Sheets spreadsheet id is missing or empty. "
                "Please set GOOGLE_SHEETS_SPREADSHEET_ID."
            )

        self.spreadsheet_id = spreadsheet_id
        self.credentials_file = credentials_file or config.CREDENTIALS_FILE
        self.worksheet_name = worksheet_name or config.WORKSHEET_NAME
        self._worksheet = worksheet

    def get_worksheet(self) -> gspread.Worksheet:
        if self._worksheet is None:
            creds = Credentials.from_service_account_file(self.credentials_file, scopes=SCOPES)
            client = gspread.authorize(creds)
            self._worksheet = client.open_by_key(self.spreadsheet_id).worksheet(self.worksheet_name)
        return self._worksheet

    def append_jobs_to_sheet(self, jobs: List[Job]) -> None:
        """
        Append one row per job, writing the header row first unless row 1
        already holds it.
        """
        worksheet = self.get_worksheet()

        values = []
        if worksheet.row_values(1) != SHEET_HEADER:
            values.append(SHEET_HEADER)
        values.extend(job_to_sheet_row(job) for job in jobs)

        worksheet.append_rows(values, value_input_option="RAW")
        logger.info(f"✓ Uploaded {len(jobs)} jobs to Google Sheets")
