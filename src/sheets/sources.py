"""Where the ranking sheet comes from: a CSV export on disk or the live Google Sheet"""
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence, Union

import gspread
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account

from src.core.models import RankingRecord
from src.core.sheet_parser import DEFAULT_LAYOUT, SheetLayout, dedupe_records, parse_rows, parse_sheet
from src.utils.validation import InputValidator, ValidationError
from config import GOOGLE_SHEETS_SCOPES, SERVICE_ACCOUNT_FILE


logger = logging.getLogger(__name__)


class SheetSourceError(Exception):
    """Raised when the ranking sheet cannot be read from its source"""
    pass


def read_sheet_file(path: Union[str, Path]) -> str:
    """UTF-8 text of a CSV export of the ranking sheet"""
    try:
        path = InputValidator.validate_file_path(path, must_exist=True)
    except ValidationError as e:
        raise SheetSourceError(str(e))

    logger.info(f"Reading ranking sheet from {path}")
    return path.read_text(encoding='utf-8-sig')


class GoogleSheetsSource:
    """Read the ranking sheet straight from Google Sheets with a service account"""

    def __init__(self, spreadsheet_key: str, worksheet: Optional[str] = None,
                 service_account_file: str = SERVICE_ACCOUNT_FILE):
        self.spreadsheet_key = spreadsheet_key
        self.worksheet = worksheet
        self.service_account_file = service_account_file
        self.client = None
        self.authenticated = False
        self._authenticate()

    def _credentials(self):
        if os.path.exists(self.service_account_file):
            logger.info("Authenticating with service account file")
            return service_account.Credentials.from_service_account_file(
                self.service_account_file,
                scopes=GOOGLE_SHEETS_SCOPES
            )

        account_json = os.getenv('GOOGLE_SERVICE_ACCOUNT_JSON')
        if account_json:
            logger.info("Authenticating with GOOGLE_SERVICE_ACCOUNT_JSON")
            return service_account.Credentials.from_service_account_info(
                json.loads(account_json),
                scopes=GOOGLE_SHEETS_SCOPES
            )
        return None

    def _authenticate(self):
        try:
            creds = self._credentials()
        except (GoogleAuthError, ValueError) as e:
            logger.error(f"Failed to load Google credentials: {e}")
            return

        if creds is None:
            logger.warning("No Google Sheets authentication found")
            return

        self.client = gspread.authorize(creds)
        self.authenticated = True

    def is_authenticated(self) -> bool:
        return self.authenticated

    def fetch_rows(self) -> List[List[str]]:
        """Every cell of the worksheet as strings, row by row.

        Blank rows are kept so row indexes line up with the sheet layout.
        """
        if not self.authenticated:
            raise SheetSourceError(
                "Not authenticated with Google Sheets. Set GOOGLE_SERVICE_ACCOUNT_FILE "
                "or GOOGLE_SERVICE_ACCOUNT_JSON"
            )

        try:
            spreadsheet = self.client.open_by_key(self.spreadsheet_key)
            sheet = spreadsheet.worksheet(self.worksheet) if self.worksheet else spreadsheet.sheet1
            rows = sheet.get_all_values()
        except gspread.exceptions.GSpreadException as e:
            raise SheetSourceError(f"Could not read Google Sheet {self.spreadsheet_key}: {e}")

        logger.info(f"Fetched {len(rows)} rows from Google Sheet {self.spreadsheet_key}")
        return rows


def load_rankings(path: Optional[Union[str, Path]] = None,
                  rows: Optional[Sequence[Sequence[str]]] = None,
                  layout: SheetLayout = DEFAULT_LAYOUT) -> List[RankingRecord]:
    """Parse the ranking sheet from a file or pre-fetched rows and drop duplicates"""
    if rows is not None:
        records = parse_rows(rows, layout)
    elif path is not None:
        records = parse_sheet(read_sheet_file(path), layout)
    else:
        raise SheetSourceError("No ranking sheet given (file path or Google Sheet)")

    unique = dedupe_records(records)
    if len(unique) < len(records):
        logger.info(f"Dropped {len(records) - len(unique)} duplicate ranking records")
    return unique
