"""
SheetBridge: spreadsheet export and import with observer hooks.

This package exports tabular data to xls, xlsx, csv and ods files and
imports spreadsheets back into nested Python structures, letting registered
observers rewrite values on the way. It is available as a library, through
a REST API (FastAPI) and through MCP (Model Context Protocol).

Architecture:
    - Service Layer pattern: orchestrators decoupled from the transports
    - openpyxl as the in-memory workbook model and xlsx engine
    - python-calamine for reading xls, xlsb and ods (Rust-based)
    - odfpy and xlwt for writing ods and legacy xls
"""

from typing import Any

from sheetbridge.models.spreadsheet_models import ExportOptions, ResultCode
from sheetbridge.services.spreadsheet_service import SpreadsheetService

__version__ = "0.1.0"

_default_service: SpreadsheetService | None = None


def get_service() -> SpreadsheetService:
    """Get the process-wide service, creating it on first use."""
    global _default_service
    if _default_service is None:
        _default_service = SpreadsheetService()
    return _default_service


def export(
    headers: Any,
    data: Any,
    path: str,
    options: ExportOptions | dict | None = None,
) -> ResultCode:
    """Export headers and data to a spreadsheet file."""
    return get_service().export(headers, data, path, options)


def import_file(
    path: str,
    keyed_by_headers: bool = True,
    keyed_by_worksheet: bool = False,
    custom_calls: dict[str, Any] | None = None,
    only_existing_cells: bool = False,
) -> dict[int | str, list[Any]] | ResultCode:
    """Import a spreadsheet file."""
    return get_service().import_file(
        path,
        keyed_by_headers=keyed_by_headers,
        keyed_by_worksheet=keyed_by_worksheet,
        custom_calls=custom_calls,
        only_existing_cells=only_existing_cells,
    )


def export_query_result(
    result: Any,
    path: str,
    options: ExportOptions | dict | None = None,
) -> bool:
    """Export a database result set to a spreadsheet file."""
    return get_service().export_query_result(result, path, options)
