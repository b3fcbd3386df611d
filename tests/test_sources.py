"""Tests for loading the ranking sheet from disk or Google Sheets"""
import json
from unittest.mock import MagicMock, patch

import gspread
import pytest

from src.core.sheet_parser import parse_sheet
from src.sheets.sources import GoogleSheetsSource, SheetSourceError, load_rankings, read_sheet_file
from helpers import build_sheet_rows, rows_to_csv, standard_block


class TestLoadRankings:
    """Test loading and deduplicating records"""

    def test_from_file(self, tmp_path, sample_csv):
        path = tmp_path / "rankings.csv"
        path.write_text(sample_csv, encoding="utf-8")

        records = load_rankings(path)
        assert len(records) == 7
        assert records[0].name == "Josh Allen"

    def test_byte_order_mark_stripped(self, tmp_path, sample_csv):
        path = tmp_path / "rankings.csv"
        path.write_text(sample_csv, encoding="utf-8-sig")
        text = read_sheet_file(path)

        assert not text.startswith("\ufeff")
        assert text.splitlines() == sample_csv.splitlines()
        assert len(parse_sheet(text)) == 7

    def test_duplicates_dropped(self):
        rows = build_sheet_rows(qbs=[standard_block("Josh Allen", tier="QB1"),
                                     standard_block("Josh Allen", tier="QB2")])
        records = load_rankings(rows=rows)
        assert [r.position_tier for r in records] == ["QB1"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(SheetSourceError, match="does not exist"):
            load_rankings(tmp_path / "missing.csv")

    def test_nothing_given(self):
        with pytest.raises(SheetSourceError):
            load_rankings()

    def test_rows_take_precedence(self, tmp_path, sample_rows):
        records = load_rankings(tmp_path / "missing.csv", rows=sample_rows)
        assert len(records) == 7


class TestGoogleSheetsSource:
    """Test the service account backed source"""

    @pytest.fixture
    def no_credentials(self, monkeypatch, tmp_path):
        monkeypatch.delenv("GOOGLE_SERVICE_ACCOUNT_JSON", raising=False)
        return str(tmp_path / "missing.json")

    def test_not_authenticated(self, no_credentials):
        source = GoogleSheetsSource("sheet-key", service_account_file=no_credentials)

        assert not source.is_authenticated()
        with pytest.raises(SheetSourceError, match="Not authenticated"):
            source.fetch_rows()

    @patch("src.sheets.sources.gspread.authorize")
    @patch("src.sheets.sources.service_account.Credentials.from_service_account_info")
    def test_fetch_rows_from_env_credentials(self, mock_creds, mock_authorize, monkeypatch,
                                             no_credentials, sample_rows):
        monkeypatch.setenv("GOOGLE_SERVICE_ACCOUNT_JSON", json.dumps({"type": "service_account"}))
        client = MagicMock()
        client.open_by_key.return_value.worksheet.return_value.get_all_values.return_value = sample_rows
        mock_authorize.return_value = client

        source = GoogleSheetsSource("sheet-key", worksheet="Rankings",
                                    service_account_file=no_credentials)
        rows = source.fetch_rows()

        assert source.is_authenticated()
        assert rows == sample_rows
        client.open_by_key.assert_called_once_with("sheet-key")
        client.open_by_key.return_value.worksheet.assert_called_once_with("Rankings")
        assert len(load_rankings(rows=rows)) == 7

    @patch("src.sheets.sources.gspread.authorize")
    @patch("src.sheets.sources.service_account.Credentials.from_service_account_file")
    def test_fetch_error(self, mock_creds, mock_authorize, tmp_path):
        account_file = tmp_path / "service_account.json"
        account_file.write_text("{}")
        client = MagicMock()
        client.open_by_key.side_effect = gspread.exceptions.GSpreadException("no access")
        mock_authorize.return_value = client

        source = GoogleSheetsSource("sheet-key", service_account_file=str(account_file))

        with pytest.raises(SheetSourceError, match="no access"):
            source.fetch_rows()

    def test_invalid_credentials_json(self, monkeypatch, no_credentials):
        monkeypatch.setenv("GOOGLE_SERVICE_ACCOUNT_JSON", "not json")
        source = GoogleSheetsSource("sheet-key", service_account_file=no_credentials)
        assert not source.is_authenticated()


def test_csv_round_trip_of_blank_rows(sample_rows):
    # Rows of empty cells survive a CSV export, so row indexes stay put
    text = rows_to_csv(sample_rows)
    assert len(text.splitlines()) == len(sample_rows)
