"""
Export orchestrator.

Turns headers and rows into a spreadsheet file: checks the preconditions,
acquires a workbook (the existing target when appending, a template, or a
fresh one), writes headers and data sheet by sheet with hook dispatches
around every cell, applies merges and hands the workbook to the writer for
the requested format.

Headers and data may be flat (one implicit sheet) or multi-sheet, either
keyed by worksheet title or positional. Positional sheets are titled
"Worksheet N", N starting at 1.

Example:
    service = ExportService(settings)
    result = service.export(
        headers=["Name", "Age"],
        data=[["Alice", 30], ["Bob", 25]],
        path="/tmp/people.xlsx",
    )
    assert result is ResultCode.SUCCESS
"""

import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from sheetbridge.adapters.factory import create_writer, load_for_update
from sheetbridge.adapters.openpyxl_adapter import OpenpyxlAdapter
from sheetbridge.cache_strategy import CacheStrategy, resolve_cache_strategy
from sheetbridge.config import Settings, get_settings
from sheetbridge.exceptions.spreadsheet_exceptions import (
    FileNotWrittenError,
    NoDataError,
    NoHeadersError,
    PathNotWritableError,
    SheetNotFoundError,
    SpreadsheetError,
)
from sheetbridge.models.spreadsheet_models import ExportFormat, ExportOptions, ResultCode
from sheetbridge.services.filename import sanitize_filename
from sheetbridge.services.hooks import HookEvent, HookPhase, HookRegistry, ValueRef

logger = logging.getLogger(__name__)

SheetKey = int | str


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def sheet_title(key: SheetKey) -> str:
    """Title of the worksheet a sheet key refers to."""
    if isinstance(key, int):
        return f"Worksheet {key + 1}"
    return str(key)


def normalize_headers(headers: Any) -> dict[SheetKey, list[Any]]:
    """
    Bring a header set into multi-sheet shape.

    A mapping is kept as is, a list of name lists becomes positional sheets
    and a flat list of names becomes sheet 0.
    """
    if isinstance(headers, Mapping):
        return {key: list(names) for key, names in headers.items()}
    headers = list(headers)
    if headers and _is_sequence(headers[0]):
        return {index: list(names) for index, names in enumerate(headers)}
    return {0: headers}


def normalize_data(data: Any) -> dict[SheetKey, list[Any]]:
    """
    Bring a dataset into multi-sheet shape.

    The dataset is multi-sheet when it is a mapping, or when its first
    element is itself a list of rows; otherwise it is the rows of sheet 0.
    """
    if isinstance(data, Mapping):
        return {key: list(rows) for key, rows in data.items()}
    data = list(data)
    first = data[0] if data else None
    if _is_sequence(first) and first and _is_sequence(first[0]):
        return {index: list(rows) for index, rows in enumerate(data)}
    return {0: data}


def row_values(row: Any, width: int = 0) -> list[Any]:
    """
    Get the cell values of a row, padded with empty strings to ``width``.

    Mappings keyed by column index are sparse rows; other mappings
    contribute their values in order. None becomes an empty string.
    """
    if isinstance(row, Mapping):
        if all(isinstance(column, int) for column in row):
            size = max([width, *(column + 1 for column in row)])
            values = [row.get(column, "") for column in range(size)]
        else:
            values = list(row.values())
    elif _is_sequence(row):
        values = list(row)
    else:
        values = [row]

    values.extend([""] * (width - len(values)))
    return ["" if value is None else value for value in values]


def is_writable(path: str) -> bool:
    """Tell whether a file can be written, or created in its directory."""
    if os.path.exists(path):
        return os.access(path, os.W_OK)
    parent = os.path.dirname(path) or "."
    return os.path.isdir(parent) and os.access(parent, os.W_OK)


class _ExportRun:
    """State of one export call."""

    def __init__(self, workbook: Workbook, options: ExportOptions, placeholder: Worksheet | None) -> None:
        self.workbook = workbook
        self.options = options
        # Default sheet of a fresh workbook, renamed by the first sheet created.
        self.placeholder = placeholder


class ExportService:
    """
    Export orchestrator.

    Attributes:
        settings: Settings holding the cache configuration and defaults.
        hooks: Registry whose export observers are dispatched.
        adapter: Workbook helpers and xlsx engine.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        hooks: HookRegistry | None = None,
        adapter: OpenpyxlAdapter | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.hooks = hooks or HookRegistry()
        self.adapter = adapter or OpenpyxlAdapter()

    def export(
        self,
        headers: Any,
        data: Any,
        path: str,
        options: ExportOptions | dict | None = None,
    ) -> ResultCode:
        """
        Export headers and data to a spreadsheet file.

        Args:
            headers: Column names, flat or multi-sheet.
            data: Rows, flat or multi-sheet.
            path: Target file path.
            options: Export options.

        Returns:
            ResultCode.SUCCESS, or the code of the failure.
        """
        try:
            self.execute(headers, data, path, options)
        except SpreadsheetError as e:
            if e.result_code is ResultCode.SERIALIZATION_FAILED:
                logger.error(f"Export to {path} failed: {e.message}", exc_info=True)
            else:
                logger.warning(f"Export to {path} rejected: {e.message}")
            return e.result_code
        return ResultCode.SUCCESS

    def execute(
        self,
        headers: Any,
        data: Any,
        path: str,
        options: ExportOptions | dict | None = None,
    ) -> str:
        """
        Export headers and data, raising on failure.

        Args:
            headers: Column names, flat or multi-sheet.
            data: Rows, flat or multi-sheet.
            path: Target file path.
            options: Export options.

        Returns:
            The path written, after filename sanitization.

        Raises:
            NoHeadersError: If headers are empty and not ignored.
            NoDataError: If data is empty.
            PathNotWritableError: If the target cannot be written.
            CachingUnavailableError: If the cache backend cannot be used.
            SheetNotFoundError: If a merge refers to an unknown sheet.
            CellRangeError: If a merge range is malformed.
            LibraryNotFoundError: If the writer's library is not installed.
            SerializationError: If loading or saving fails.
            FileNotWrittenError: If the file is absent after saving.
        """
        options = self._prepare_options(headers, options)

        if not data:
            raise NoDataError()
        if not is_writable(path):
            raise PathNotWritableError(path)

        path = sanitize_filename(path)
        strategy = resolve_cache_strategy(self.settings)

        run = self._acquire(path, options, strategy)
        self.adapter.apply_properties(
            run.workbook,
            creator=options.creator or self.settings.default_creator,
            title=options.title,
            subject=options.subject,
            description=options.description,
        )

        header_sets: dict[SheetKey, list[Any]] = {}
        if not options.ignore_headers:
            header_sets = self._write_headers(run, headers)
        self._write_data(run, data, header_sets)
        self._apply_merges(run)

        fmt = ExportFormat.resolve(options.format, path)
        create_writer(fmt).save(run.workbook, path)

        if not os.path.exists(path):
            raise FileNotWrittenError(path)

        logger.info(f"Exported {len(run.workbook.worksheets)} worksheet(s) to {path} as {fmt.value}")
        return path

    def _prepare_options(self, headers: Any, options: ExportOptions | dict | None) -> ExportOptions:
        if options is None:
            options = ExportOptions()
        elif isinstance(options, dict):
            options = ExportOptions.model_validate(options)

        if not headers and not options.ignore_headers:
            raise NoHeadersError()

        if options.ignore_headers is None:
            options = options.model_copy(update={"ignore_headers": not headers})
        return options

    def _acquire(self, path: str, options: ExportOptions, strategy: CacheStrategy) -> _ExportRun:
        if options.append and os.path.exists(path):
            logger.debug(f"Appending to existing file {path}")
            return _ExportRun(load_for_update(path, strategy), options, None)

        if options.template:
            logger.debug(f"Starting from template {options.template}")
            return _ExportRun(load_for_update(options.template, strategy), options, None)

        workbook = self.adapter.create_workbook()
        return _ExportRun(workbook, options, workbook.active)

    def _worksheet(self, run: _ExportRun, key: SheetKey) -> Worksheet:
        """Find the worksheet for a sheet key, creating it when missing."""
        title = sheet_title(key)
        worksheet = self.adapter.get_worksheet(run.workbook, title)
        if worksheet is not None:
            if worksheet is run.placeholder:
                run.placeholder = None
            return worksheet

        worksheet = self.adapter.create_worksheet(run.workbook, title, reuse=run.placeholder)
        run.placeholder = None
        self.hooks.dispatch(
            HookPhase.EXPORT,
            HookEvent.NEW_SHEET,
            ValueRef(worksheet),
            run.workbook,
            run.options,
        )
        return worksheet

    def _write_cell(self, run: _ExportRun, worksheet: Worksheet, column: int, row: int, value: Any) -> None:
        ref = ValueRef(value)
        self.hooks.dispatch(HookPhase.EXPORT, HookEvent.PRE_CELL, ref, worksheet, run.options, column, row)
        self.adapter.write_cell(worksheet, column, row, ref.value)
        self.hooks.dispatch(HookPhase.EXPORT, HookEvent.POST_CELL, ref, worksheet, run.options, column, row)

    def _write_headers(self, run: _ExportRun, headers: Any) -> dict[SheetKey, list[Any]]:
        ref = ValueRef(normalize_headers(headers))
        self.hooks.dispatch(HookPhase.EXPORT, HookEvent.HEADERS, ref, run.workbook, run.options)
        header_sets = ref.value

        for key, names in header_sets.items():
            worksheet = self._worksheet(run, key)
            for column, name in enumerate(names):
                self._write_cell(run, worksheet, column, 1, name)

        return header_sets

    def _write_data(self, run: _ExportRun, data: Any, header_sets: dict[SheetKey, list[Any]]) -> None:
        ref = ValueRef(normalize_data(data))
        self.hooks.dispatch(HookPhase.EXPORT, HookEvent.DATA, ref, run.workbook, run.options)

        for key, rows in ref.value.items():
            worksheet = self._worksheet(run, key)
            # Rows go below whatever the sheet already holds.
            offset = self.adapter.highest_row(worksheet)
            width = len(header_sets.get(key, []))
            for i, row in enumerate(rows):
                for column, value in enumerate(row_values(row, width)):
                    self._write_cell(run, worksheet, column, offset + i + 1, value)

    def _apply_merges(self, run: _ExportRun) -> None:
        for key, ranges in run.options.merge_cells.items():
            worksheet = self.adapter.get_worksheet(run.workbook, sheet_title(key))
            if worksheet is None and isinstance(key, str) and key.isdigit():
                # JSON object keys are strings, so "0" may name positional sheet 0.
                worksheet = self.adapter.get_worksheet(run.workbook, sheet_title(int(key)))
            if worksheet is None:
                raise SheetNotFoundError(sheet_title(key), run.workbook.sheetnames)
            for cell_range in ranges:
                self.adapter.merge_range(worksheet, cell_range)
