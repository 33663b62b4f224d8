"""
Test fixtures and utilities for the spreadsheet service tests.

This module provides shared fixtures including temporary files,
settings, hook registries and service instances. Sample workbooks are
written with XlsxWriter so reading is tested against files produced by
an independent engine.
"""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
import xlsxwriter

from sheetbridge.config import Settings
from sheetbridge.services.export_service import ExportService
from sheetbridge.services.hooks import HookRegistry
from sheetbridge.services.import_service import ImportService
from sheetbridge.services.spreadsheet_service import SpreadsheetService


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings() -> Settings:
    """
    Create settings with in-memory caching, independent of the environment.

    Returns:
        Settings instance.
    """
    return Settings(_env_file=None, cache_method="memory", default_creator="SheetBridge")


@pytest.fixture
def hooks() -> HookRegistry:
    """Create an empty hook registry."""
    return HookRegistry()


@pytest.fixture
def export_service(settings: Settings, hooks: HookRegistry) -> ExportService:
    """Create an ExportService sharing the test settings and hooks."""
    return ExportService(settings=settings, hooks=hooks)


@pytest.fixture
def import_service(settings: Settings, hooks: HookRegistry) -> ImportService:
    """Create an ImportService sharing the test settings and hooks."""
    return ImportService(settings=settings, hooks=hooks)


@pytest.fixture
def spreadsheet_service(settings: Settings, hooks: HookRegistry) -> SpreadsheetService:
    """Create a SpreadsheetService sharing the test settings and hooks."""
    return SpreadsheetService(settings=settings, hooks=hooks)


@pytest.fixture
def sample_xlsx_file(temp_dir: Path) -> Path:
    """
    Create a sample Excel file for testing.

    Args:
        temp_dir: Temporary directory path.

    Returns:
        Path to a workbook with a "Users" sheet holding a header row and
        three data rows.
    """
    file_path = temp_dir / "sample.xlsx"

    workbook = xlsxwriter.Workbook(str(file_path))
    worksheet = workbook.add_worksheet("Users")
    rows = [
        ["Name", "Age", "Email"],
        ["Alice", 30, "alice@example.com"],
        ["Bob", 25, "bob@example.com"],
        ["Charlie", 35, "charlie@example.com"],
    ]
    for row_index, row in enumerate(rows):
        worksheet.write_row(row_index, 0, row)
    workbook.close()

    return file_path


@pytest.fixture
def multi_sheet_xlsx_file(temp_dir: Path) -> Path:
    """
    Create an Excel file with multiple sheets for testing.

    Args:
        temp_dir: Temporary directory path.

    Returns:
        Path to a workbook with "Users" and "Products" sheets.
    """
    file_path = temp_dir / "multi_sheet.xlsx"

    sheets_data = {
        "Users": [
            ["Name", "Age"],
            ["Alice", 30],
            ["Bob", 25],
        ],
        "Products": [
            ["Name", "Price"],
            ["Widget", 10.99],
            ["Gadget", 24.99],
        ],
    }

    workbook = xlsxwriter.Workbook(str(file_path))
    for sheet_name, rows in sheets_data.items():
        worksheet = workbook.add_worksheet(sheet_name)
        for row_index, row in enumerate(rows):
            worksheet.write_row(row_index, 0, row)
    workbook.close()

    return file_path


@pytest.fixture
def sample_data() -> list[list]:
    """
    Return sample data for export tests.

    Returns:
        List of rows with sample data.
    """
    return [
        ["Alice", 30, "Engineering"],
        ["Bob", 25, "Marketing"],
        ["Charlie", 35, "Sales"],
    ]


@pytest.fixture
def sample_headers() -> list[str]:
    """
    Return sample headers for export tests.

    Returns:
        List of column headers.
    """
    return ["Name", "Age", "Department"]
