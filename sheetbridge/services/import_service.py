"""
Import orchestrator.

Reads a spreadsheet file into nested Python structures: one bucket per
worksheet (keyed by position, or by title), each holding rows that are
either dicts keyed by the sheet's first row or positional lists.

Example:
    service = ImportService(settings)
    sheets = service.import_file("/tmp/people.xlsx")
    # {0: [{"Name": "Alice", "Age": 30}, {"Name": "Bob", "Age": 25}]}
"""

import logging
import os
from collections.abc import Callable
from typing import Any

from openpyxl import Workbook

from sheetbridge.adapters.factory import SpreadsheetReader, create_reader
from sheetbridge.cache_strategy import CacheStrategy, resolve_cache_strategy
from sheetbridge.config import Settings, get_settings
from sheetbridge.exceptions.spreadsheet_exceptions import (
    FileNotReadableError,
    SpreadsheetError,
)
from sheetbridge.models.spreadsheet_models import ImportOptions, ResultCode
from sheetbridge.services.hooks import HookEvent, HookPhase, HookRegistry, ValueRef

logger = logging.getLogger(__name__)

ReaderFactory = Callable[[str, CacheStrategy], SpreadsheetReader]

DEFAULT_CUSTOM_CALLS = {"set_read_data_only": [True]}


class ImportService:
    """
    Import orchestrator.

    Attributes:
        settings: Settings holding the cache configuration.
        hooks: Registry whose import observers are dispatched.
        reader_factory: Callable returning a reader for a path and strategy.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        hooks: HookRegistry | None = None,
        reader_factory: ReaderFactory = create_reader,
    ) -> None:
        self.settings = settings or get_settings()
        self.hooks = hooks or HookRegistry()
        self.reader_factory = reader_factory

    def import_file(
        self,
        path: str,
        keyed_by_headers: bool = True,
        keyed_by_worksheet: bool = False,
        custom_calls: dict[str, Any] | None = None,
        only_existing_cells: bool = False,
    ) -> dict[int | str, list[Any]] | ResultCode:
        """
        Import a spreadsheet file.

        Args:
            path: File to read.
            keyed_by_headers: Use the first row of each sheet as row keys.
            keyed_by_worksheet: Bucket rows by worksheet title.
            custom_calls: Reader calls to apply before loading, name to
                argument list.
            only_existing_cells: Only visit cells that hold a value.

        Returns:
            The imported sheets, or the ResultCode of the failure.
        """
        try:
            return self.read(path, keyed_by_headers, keyed_by_worksheet, custom_calls, only_existing_cells)
        except SpreadsheetError as e:
            if e.result_code is ResultCode.SERIALIZATION_FAILED:
                logger.error(f"Import of {path} failed: {e.message}", exc_info=True)
            else:
                logger.warning(f"Import of {path} rejected: {e.message}")
            return e.result_code

    def read(
        self,
        path: str,
        keyed_by_headers: bool = True,
        keyed_by_worksheet: bool = False,
        custom_calls: dict[str, Any] | None = None,
        only_existing_cells: bool = False,
    ) -> dict[int | str, list[Any]]:
        """
        Import a spreadsheet file, raising on failure.

        Raises:
            FileNotReadableError: If the file cannot be read or no reader
                handles it.
            CachingUnavailableError: If the cache backend cannot be used.
            SerializationError: If the reader fails to load the file.
        """
        if not os.path.isfile(path) or not os.access(path, os.R_OK):
            raise FileNotReadableError(path, reason="file does not exist or cannot be read")

        options = ImportOptions(
            path=path,
            keyed_by_headers=keyed_by_headers,
            keyed_by_worksheet=keyed_by_worksheet,
            custom_calls=custom_calls or {},
            only_existing_cells=only_existing_cells,
        )

        strategy = resolve_cache_strategy(self.settings)
        reader = self.reader_factory(path, strategy)
        self._apply_custom_calls(reader, {**DEFAULT_CUSTOM_CALLS, **options.custom_calls})

        workbook = reader.load()
        try:
            sheets = self._collect(workbook, options)
        finally:
            workbook.close()

        logger.info(f"Imported {len(sheets)} worksheet(s) from {path}")
        return sheets

    def _apply_custom_calls(self, reader: Any, calls: dict[str, list[Any]]) -> None:
        for name, args in calls.items():
            method = None if name.startswith("_") else getattr(reader, name, None)
            if not callable(method):
                logger.debug(f"{type(reader).__name__} does not support {name}(), skipped")
                continue
            method(*args)

    def _collect(self, workbook: Workbook, options: ImportOptions) -> dict[int | str, list[Any]]:
        sheets: dict[int | str, list[Any]] = {}
        headers: dict[int | str, dict[int, Any]] = {}

        self.hooks.dispatch(HookPhase.IMPORT, HookEvent.FULL, ValueRef(workbook), workbook, options)

        for index, worksheet in enumerate(workbook.worksheets):
            self.hooks.dispatch(HookPhase.IMPORT, HookEvent.SHEET, ValueRef(worksheet), workbook, options)

            key = worksheet.title if options.keyed_by_worksheet else index
            rows = sheets.setdefault(key, [])
            sheet_headers = headers.setdefault(key, {})

            for j, cells in enumerate(worksheet.iter_rows()):
                self.hooks.dispatch(HookPhase.IMPORT, HookEvent.ROW, ValueRef(cells), worksheet, options, row=j)

                for k, cell in enumerate(cells):
                    if options.only_existing_cells and cell.value is None:
                        continue

                    # Skipped cells leave gaps, so take the position from the cell.
                    column = cell.column - 1 if options.only_existing_cells else k

                    value = cell.value
                    if value is None:
                        value = ""
                    elif isinstance(value, str):
                        value = value.strip()

                    ref = ValueRef(value)
                    self.hooks.dispatch(HookPhase.IMPORT, HookEvent.PRE_CELL, ref, worksheet, options, column, j)

                    if options.keyed_by_headers:
                        if j == 0:
                            sheet_headers.setdefault(column, column if ref.value == "" else ref.value)
                        else:
                            while len(rows) < j:
                                rows.append({})
                            name = sheet_headers.get(column, column)
                            rows[j - 1][name] = ref.value
                            self.hooks.dispatch(HookPhase.IMPORT, HookEvent.POST_CELL, ref, worksheet, options, column, j)
                            rows[j - 1][name] = ref.value
                    else:
                        while len(rows) <= j:
                            rows.append([])
                        row = rows[j]
                        row.extend([""] * (column + 1 - len(row)))
                        row[column] = ref.value
                        self.hooks.dispatch(HookPhase.IMPORT, HookEvent.POST_CELL, ref, worksheet, options, column, j)
                        row[column] = ref.value

        return sheets
