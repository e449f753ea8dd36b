from unittest.mock import MagicMock

import pytest

from techstars_scraper import config
from techstars_scraper.errors import ConfigError
from techstars_scraper.models import Job
from techstars_scraper.upload_to_sheets import SHEET_HEADER, GoogleSheetsUploader, job_to_sheet_row


def _job(**kwargs):
    defaults = dict(
        job_page_url="https://jobs.techstars.com/jobs/abc-123",
        id=7,
        position_name="Data Scientist",
        organization_title="Acme Robotics",
        location_raw="Austin, TX, USA",
        location_city="Austin",
        location_state="TX",
        location_country="USA",
        posted_date_unix=1709510400,
        tags="Data Science, Remote",
    )
    defaults.update(kwargs)
    return Job(**defaults)


def test_row_follows_header_order():
    row = job_to_sheet_row(_job())

    assert len(row) == len(SHEET_HEADER)
    assert row[SHEET_HEADER.index("ID")] == "7"
    assert row[SHEET_HEADER.index("Job URL")] == "https://jobs.techstars.com/jobs/abc-123"
    assert row[SHEET_HEADER.index("City")] == "Austin"
    assert row[SHEET_HEADER.index("Posted Date")] == "1709510400"
    assert row[SHEET_HEADER.index("Tags")] == "Data Science, Remote"


def test_missing_values_become_empty_cells():
    row = job_to_sheet_row(Job(job_page_url="https://jobs.techstars.com/jobs/x"))
    assert row[SHEET_HEADER.index("Logo URL")] == ""
    assert row[SHEET_HEADER.index("Posted Date")] == ""


def test_header_written_to_empty_sheet():
    worksheet = MagicMock()
    worksheet.row_values.return_value = []
    uploader = GoogleSheetsUploader(spreadsheet_id="sheet-1", worksheet=worksheet)

    uploader.append_jobs_to_sheet([_job(id=1), _job(id=2, job_page_url="https://jobs.techstars.com/jobs/b")])

    rows = worksheet.append_rows.call_args.args[0]
    assert rows[0] == SHEET_HEADER
    assert [row[0] for row in rows[1:]] == ["1", "2"]
    assert worksheet.append_rows.call_args.kwargs == {"value_input_option": "RAW"}


def test_header_not_repeated():
    worksheet = MagicMock()
    worksheet.row_values.return_value = list(SHEET_HEADER)
    uploader = GoogleSheetsUploader(spreadsheet_id="sheet-1", worksheet=worksheet)

    uploader.append_jobs_to_sheet([_job()])

    rows = worksheet.append_rows.call_args.args[0]
    assert len(rows) == 1
    assert rows[0][0] == "7"


@pytest.mark.parametrize("spreadsheet_id", ["", "   "])
def test_blank_spreadsheet_id_rejected(spreadsheet_id):
    with pytest.raises(ConfigError, match="GOOGLE_SHEETS_SPREADSHEET_ID"):
        GoogleSheetsUploader(spreadsheet_id=spreadsheet_id)


def test_spreadsheet_id_from_config(monkeypatch):
    monkeypatch.setattr(config, "SPREADSHEET_ID", None)
    with pytest.raises(ConfigError):
        GoogleSheetsUploader()


def test_worksheet_opened_with_service_account(monkeypatch):
    from techstars_scraper import upload_to_sheets

    creds = object()
    from_file = MagicMock(return_value=creds)
    client = MagicMock()
    authorize = MagicMock(return_value=client)
    monkeypatch.setattr(upload_to_sheets.Credentials, "from_service_account_file", from_file)
    monkeypatch.setattr(upload_to_sheets.gspread, "authorize", authorize)

    uploader = GoogleSheetsUploader(
        spreadsheet_id="sheet-1", credentials_file="creds.json", worksheet_name="Jobs"
    )
    worksheet = uploader.get_worksheet()

    from_file.assert_called_once_with("creds.json", scopes=upload_to_sheets.SCOPES)
    authorize.assert_called_once_with(creds)
    client.open_by_key.assert_called_once_with("sheet-1")
    client.open_by_key.return_value.worksheet.assert_called_once_with("Jobs")
    assert worksheet is client.open_by_key.return_value.worksheet.return_value
    assert uploader.get_worksheet() is worksheet
