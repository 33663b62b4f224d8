"""
Spreadsheet service facade.

This module provides the SpreadsheetService class which bundles the export
and import orchestrators around one settings object and one hook registry,
and serves as the single entry point for the package-level functions, the
FastAPI app and the MCP server.

Example:
    service = SpreadsheetService()

    service.hooks.register(HookPhase.EXPORT, my_observer)
    service.export(["Name"], [["Alice"]], "/tmp/names.xlsx")

    cursor = connection.execute("SELECT name, age FROM people")
    service.export_query_result(cursor, "/tmp/people.xlsx")
"""

import os
import time
from collections.abc import Mapping
from typing import Any

from sheetbridge.config import Settings, get_settings
from sheetbridge.models.spreadsheet_models import (
    ExportOptions,
    ExportRequest,
    ExportResponse,
    ImportRequest,
    ImportResponse,
    ResultCode,
)
from sheetbridge.services.export_service import ExportService
from sheetbridge.services.hooks import HookRegistry
from sheetbridge.services.import_service import ImportService


def query_result_rows(result: Any) -> tuple[list[str], list[list[Any]]]:
    """
    Get field names and row values from a database result.

    Accepts a DB-API cursor (``description`` and ``fetchall()``), a result
    exposing ``keys()`` (SQLAlchemy style) or an iterable of mappings such
    as ``sqlite3.Row`` objects or dicts.

    Args:
        result: The database result set.

    Returns:
        Tuple of (headers, rows). Headers are empty when there are no rows.
    """
    if getattr(result, "description", None) is not None and hasattr(result, "fetchall"):
        headers = [column[0] for column in result.description]
        rows = [list(row) for row in result.fetchall()]
    elif callable(getattr(result, "keys", None)) and not isinstance(result, Mapping):
        headers = list(result.keys())
        rows = [list(row) for row in result]
    else:
        records = list(result)
        headers = list(records[0].keys()) if records else []
        rows = [[record[name] for name in headers] for record in records]

    if not rows:
        return [], []
    return headers, rows


class SpreadsheetService:
    """
    Facade over the export and import orchestrators.

    The service is designed to be transport-agnostic: the ``*_request``
    methods take and return Pydantic models and raise SpreadsheetError
    subclasses, while ``export`` and ``import_file`` report failures as
    result codes.

    Attributes:
        settings: Settings shared by both orchestrators.
        hooks: Hook registry shared by both orchestrators.
        exporter: ExportService instance.
        importer: ImportService instance.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        hooks: HookRegistry | None = None,
    ) -> None:
        """
        Initialize the SpreadsheetService.

        Args:
            settings: Optional Settings. If None, uses the cached settings.
            hooks: Optional HookRegistry. If None, creates an empty one.
        """
        self.settings = settings or get_settings()
        self.hooks = hooks or HookRegistry()
        self.exporter = ExportService(self.settings, self.hooks)
        self.importer = ImportService(self.settings, self.hooks)

    def export(
        self,
        headers: Any,
        data: Any,
        path: str,
        options: ExportOptions | dict | None = None,
    ) -> ResultCode:
        """Export headers and data; see ExportService.export."""
        return self.exporter.export(headers, data, path, options)

    def import_file(
        self,
        path: str,
        keyed_by_headers: bool = True,
        keyed_by_worksheet: bool = False,
        custom_calls: dict[str, Any] | None = None,
        only_existing_cells: bool = False,
    ) -> dict[int | str, list[Any]] | ResultCode:
        """Import a spreadsheet; see ImportService.import_file."""
        return self.importer.import_file(
            path,
            keyed_by_headers=keyed_by_headers,
            keyed_by_worksheet=keyed_by_worksheet,
            custom_calls=custom_calls,
            only_existing_cells=only_existing_cells,
        )

    def export_query_result(
        self,
        result: Any,
        path: str,
        options: ExportOptions | dict | None = None,
    ) -> bool:
        """
        Export a database result set.

        Headers come from the first row's field names and data from the
        values of every row.

        Args:
            result: DB-API cursor, SQLAlchemy-style result or iterable of
                mappings.
            path: Target file path.
            options: Export options.

        Returns:
            True if the export succeeded.
        """
        headers, rows = query_result_rows(result)
        return self.export(headers, rows, path, options) is ResultCode.SUCCESS

    def export_request(self, request: ExportRequest) -> ExportResponse:
        """
        Export from a transport request.

        Args:
            request: ExportRequest with headers, data, path and options.

        Returns:
            ExportResponse describing the written file.

        Raises:
            SpreadsheetError: Any failure of the export, with its result code.
        """
        start_time = time.perf_counter()

        path = self.exporter.execute(request.headers, request.data, request.file_path, request.options)

        processing_time = (time.perf_counter() - start_time) * 1000

        return ExportResponse(
            success=True,
            result_code=ResultCode.SUCCESS,
            file_path=path,
            file_size_bytes=os.path.getsize(path),
            processing_time_ms=round(processing_time, 2),
        )

    def import_request(self, request: ImportRequest) -> ImportResponse:
        """
        Import from a transport request.

        Sheet keys are turned into strings for serialization.

        Args:
            request: ImportRequest with the path and import flags.

        Returns:
            ImportResponse holding the imported sheets.

        Raises:
            SpreadsheetError: Any failure of the import, with its result code.
        """
        start_time = time.perf_counter()

        sheets = self.importer.read(
            request.file_path,
            keyed_by_headers=request.keyed_by_headers,
            keyed_by_worksheet=request.keyed_by_worksheet,
            custom_calls=request.custom_calls,
            only_existing_cells=request.only_existing_cells,
        )

        processing_time = (time.perf_counter() - start_time) * 1000

        return ImportResponse(
            success=True,
            result_code=ResultCode.SUCCESS,
            sheets={str(key): rows for key, rows in sheets.items()},
            sheet_count=len(sheets),
            processing_time_ms=round(processing_time, 2),
        )
