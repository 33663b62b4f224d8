"""
Tests for the SpreadsheetService facade and the package-level functions.
"""

import sqlite3
from collections.abc import Generator
from pathlib import Path

import pytest

import sheetbridge
from sheetbridge.exceptions.spreadsheet_exceptions import NoDataError
from sheetbridge.models.spreadsheet_models import ExportRequest, ImportRequest, ResultCode
from sheetbridge.services.spreadsheet_service import SpreadsheetService, query_result_rows


@pytest.fixture
def connection() -> Generator[sqlite3.Connection, None, None]:
    """Create an in-memory database with a people table."""
    connection = sqlite3.connect(":memory:")
    connection.execute("CREATE TABLE people (name TEXT, age INTEGER)")
    connection.executemany(
        "INSERT INTO people VALUES (?, ?)",
        [("Alice", 30), ("Bob", 25)],
    )
    yield connection
    connection.close()


class TestQueryResultRows:
    """Tests for building headers and rows from database results."""

    def test_cursor(self, connection: sqlite3.Connection) -> None:
        cursor = connection.execute("SELECT name, age FROM people ORDER BY name")

        assert query_result_rows(cursor) == (["name", "age"], [["Alice", 30], ["Bob", 25]])

    def test_row_mappings(self, connection: sqlite3.Connection) -> None:
        connection.row_factory = sqlite3.Row
        rows = connection.execute("SELECT name, age FROM people ORDER BY name").fetchall()

        assert query_result_rows(rows) == (["name", "age"], [["Alice", 30], ["Bob", 25]])

    def test_dicts(self) -> None:
        assert query_result_rows([{"a": 1, "b": 2}]) == (["a", "b"], [[1, 2]])

    def test_empty_result_has_no_headers(self, connection: sqlite3.Connection) -> None:
        cursor = connection.execute("SELECT name, age FROM people WHERE age > 100")

        assert query_result_rows(cursor) == ([], [])


class TestSpreadsheetService:
    """Tests for the facade operations."""

    def test_export_query_result(
        self,
        spreadsheet_service: SpreadsheetService,
        connection: sqlite3.Connection,
        temp_dir: Path,
    ) -> None:
        """Test exporting a cursor and reading it back."""
        path = temp_dir / "people.xlsx"
        cursor = connection.execute("SELECT name, age FROM people ORDER BY name")

        assert spreadsheet_service.export_query_result(cursor, str(path)) is True

        assert spreadsheet_service.import_file(str(path)) == {
            0: [{"name": "Alice", "age": 30}, {"name": "Bob", "age": 25}]
        }

    def test_export_empty_query_result(
        self,
        spreadsheet_service: SpreadsheetService,
        connection: sqlite3.Connection,
        temp_dir: Path,
    ) -> None:
        """Test that an empty result set exports nothing."""
        cursor = connection.execute("SELECT name FROM people WHERE 0")

        assert spreadsheet_service.export_query_result(cursor, str(temp_dir / "none.xlsx")) is False
        assert list(temp_dir.iterdir()) == []

    def test_export_request(self, spreadsheet_service: SpreadsheetService, temp_dir: Path) -> None:
        """Test the request/response export."""
        request = ExportRequest(
            file_path=str(temp_dir / "request.xlsx"),
            headers=["a"],
            data=[[1], [2]],
        )

        response = spreadsheet_service.export_request(request)

        assert response.success is True
        assert response.result_code is ResultCode.SUCCESS
        assert response.file_path == str(temp_dir / "request.xlsx")
        assert response.file_size_bytes > 0
        assert response.processing_time_ms >= 0

    def test_export_request_raises(self, spreadsheet_service: SpreadsheetService, temp_dir: Path) -> None:
        request = ExportRequest(file_path=str(temp_dir / "request.xlsx"), headers=["a"], data=[])

        with pytest.raises(NoDataError):
            spreadsheet_service.export_request(request)

    def test_import_request_uses_string_keys(
        self,
        spreadsheet_service: SpreadsheetService,
        multi_sheet_xlsx_file: Path,
    ) -> None:
        """Test that sheet indexes are serialized as strings."""
        response = spreadsheet_service.import_request(ImportRequest(file_path=str(multi_sheet_xlsx_file)))

        assert response.sheet_count == 2
        assert list(response.sheets) == ["0", "1"]
        assert response.sheets["1"][0] == {"Name": "Widget", "Price": 10.99}

    def test_hooks_are_shared(self, spreadsheet_service: SpreadsheetService) -> None:
        assert spreadsheet_service.exporter.hooks is spreadsheet_service.hooks
        assert spreadsheet_service.importer.hooks is spreadsheet_service.hooks


class TestPackageFunctions:
    """Tests for the module-level convenience functions."""

    @pytest.fixture(autouse=True)
    def default_service(self, spreadsheet_service: SpreadsheetService, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sheetbridge, "_default_service", spreadsheet_service)

    def test_export_and_import(self, temp_dir: Path) -> None:
        path = temp_dir / "package.xlsx"

        assert sheetbridge.export(["a"], [[1]], str(path)) is ResultCode.SUCCESS
        assert sheetbridge.import_file(str(path)) == {0: [{"a": 1}]}

    def test_export_query_result(self, temp_dir: Path) -> None:
        path = temp_dir / "package.csv"

        assert sheetbridge.export_query_result([{"a": 1}], str(path)) is True
        assert path.read_text(encoding="utf-8").splitlines() == ["a", "1"]

    def test_get_service_is_cached(self, spreadsheet_service: SpreadsheetService) -> None:
        assert sheetbridge.get_service() is spreadsheet_service
