"""
Openpyxl adapter: the in-memory workbook model and the xlsx engine.

Every reader in this package loads into an openpyxl Workbook and every
writer serializes one, so this adapter also carries the workbook helpers
the export orchestrator needs: document properties, worksheet lookup,
cell writes, highest-row bookkeeping and merges.

Supported formats:
    - .xlsx (Excel 2007+)
    - .xlsm (Excel Macro-Enabled)
    - .xltx / .xltm (templates, loaded as regular workbooks)

Example:
    adapter = OpenpyxlAdapter()
    workbook = adapter.create_workbook()
    adapter.write_cell(workbook.active, column=0, row=1, value="Name")
    adapter.save(workbook, "/path/to/output.xlsx")
"""

import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment
from openpyxl.worksheet.worksheet import Worksheet

from sheetbridge.cache_strategy import CacheStrategy
from sheetbridge.exceptions.spreadsheet_exceptions import (
    CellRangeError,
    FileNotReadableError,
    SerializationError,
)


class OpenpyxlAdapter:
    """
    Adapter for openpyxl workbook operations and xlsx serialization.

    Attributes:
        SUPPORTED_EXTENSIONS: Tuple of extensions openpyxl can load.
        TEMPLATE_EXTENSIONS: Template extensions, saved back as workbooks.
    """

    SUPPORTED_EXTENSIONS = (".xlsx", ".xlsm", ".xltx", ".xltm")
    TEMPLATE_EXTENSIONS = (".xltx", ".xltm")

    def create_workbook(self) -> Workbook:
        """
        Create an empty workbook.

        Returns:
            A new Workbook holding exactly one default worksheet.
        """
        return Workbook()

    def apply_properties(
        self,
        workbook: Workbook,
        creator: str,
        title: str | None = None,
        subject: str | None = None,
        description: str | None = None,
    ) -> None:
        """
        Set document properties; title, subject and description only when given.

        Args:
            workbook: Workbook to update.
            creator: Document creator, also recorded as last modifier.
            title: Optional document title.
            subject: Optional document subject.
            description: Optional document description.
        """
        properties = workbook.properties
        properties.creator = creator
        properties.lastModifiedBy = creator
        if title is not None:
            properties.title = title
        if subject is not None:
            properties.subject = subject
        if description is not None:
            properties.description = description

    def get_worksheet(self, workbook: Workbook, title: str) -> Worksheet | None:
        """Get a worksheet by exact title, or None."""
        if title in workbook.sheetnames:
            return workbook[title]
        return None

    def create_worksheet(
        self,
        workbook: Workbook,
        title: str,
        reuse: Worksheet | None = None,
    ) -> Worksheet:
        """
        Add a worksheet, or rename an unused one.

        Args:
            workbook: Workbook to add the sheet to.
            title: Title of the new sheet.
            reuse: Untouched sheet to rename instead of adding a new one.

        Returns:
            The worksheet titled ``title``.

        Raises:
            SerializationError: If openpyxl rejects the title.
        """
        try:
            if reuse is not None:
                reuse.title = title
                return reuse
            return workbook.create_sheet(title)
        except ValueError as e:
            raise SerializationError(
                file_path=title,
                operation="add a worksheet to",
                reason=str(e),
            ) from e

    def highest_row(self, worksheet: Worksheet) -> int:
        """
        Get the last row (1-based) holding a value.

        Empty strings do not count: openpyxl saves them as empty cells, so
        a row of them is gone once the file is loaded again.

        Args:
            worksheet: Worksheet to inspect.

        Returns:
            Index of the last row with any value, or 0 for an empty sheet.
        """
        highest = 0
        for index, values in enumerate(worksheet.iter_rows(values_only=True), start=1):
            if any(value is not None and value != "" for value in values):
                highest = index
        return highest

    def write_cell(self, worksheet: Worksheet, column: int, row: int, value: Any) -> None:
        """
        Write a value to a cell.

        Args:
            worksheet: The worksheet to write to.
            column: Column index (0-based).
            row: Row index (1-based).
            value: Value to write.

        Raises:
            SerializationError: If openpyxl cannot store the value type.
        """
        try:
            worksheet.cell(row=row, column=column + 1, value=value)
        except (TypeError, ValueError) as e:
            raise SerializationError(
                file_path=worksheet.title,
                operation="write cell to",
                reason=str(e),
            ) from e

    def merge_range(self, worksheet: Worksheet, cell_range: str) -> None:
        """
        Center a range horizontally, then merge it.

        Args:
            worksheet: Worksheet holding the range.
            cell_range: Range in A1 notation (e.g., "A1:C1").

        Raises:
            CellRangeError: If the range notation is invalid.
        """
        cell_range = self._validate_range(cell_range)

        centered = Alignment(horizontal="center")
        for row in worksheet[cell_range]:
            for cell in row:
                cell.alignment = centered

        worksheet.merge_cells(cell_range)

    def _validate_range(self, cell_range: str) -> str:
        """
        Validate an A1 range string.

        Args:
            cell_range: A1 notation string like "A1:C10".

        Returns:
            The normalized (upper-cased, stripped) range.

        Raises:
            CellRangeError: If the range notation is invalid.
        """
        normalized = cell_range.strip().upper()
        match = re.match(r"^([A-Z]+)(\d+):([A-Z]+)(\d+)$", normalized)
        if not match:
            raise CellRangeError(
                cell_range=cell_range,
                reason="Invalid A1 notation format. Expected format: 'A1:C10'",
            )

        start_col = self._column_letter_to_index(match.group(1))
        start_row = int(match.group(2))
        end_col = self._column_letter_to_index(match.group(3))
        end_row = int(match.group(4))

        if start_row < 1 or end_row < 1:
            raise CellRangeError(cell_range=cell_range, reason="Row numbers start at 1")

        if start_row > end_row or start_col > end_col:
            raise CellRangeError(
                cell_range=cell_range,
                reason="Start position must be before end position",
            )

        return normalized

    def _column_letter_to_index(self, column_letter: str) -> int:
        """
        Convert Excel column letter(s) to 0-based index.

        Args:
            column_letter: Column letter(s) like "A", "B", "AA", "AB".

        Returns:
            0-based column index.
        """
        result = 0
        for char in column_letter.upper():
            result = result * 26 + (ord(char) - ord("A") + 1)
        return result - 1

    def load(
        self,
        file_path: str,
        data_only: bool = False,
        read_only: bool = False,
        check_extension: bool = True,
    ) -> Workbook:
        """
        Open a workbook with openpyxl.

        Args:
            file_path: Path to the workbook.
            data_only: If True, read cached values instead of formulas.
            read_only: If True, stream the workbook instead of loading it.
            check_extension: If False, the file is known to hold xlsx
                content whatever its name. Such files are read from an
                open handle and always fully loaded.

        Returns:
            Workbook instance. Templates come back as regular workbooks.

        Raises:
            FileNotReadableError: If the file does not exist or has an
                extension openpyxl cannot load.
            SerializationError: If openpyxl fails to parse the file.
        """
        path = Path(file_path)
        known_extension = path.suffix.lower() in self.SUPPORTED_EXTENSIONS

        if not path.is_file():
            raise FileNotReadableError(file_path, reason="file does not exist")

        if check_extension and not known_extension:
            raise FileNotReadableError(
                file_path,
                reason=f"Unsupported file extension: {path.suffix}",
            )

        try:
            if known_extension:
                workbook = load_workbook(str(path), data_only=data_only, read_only=read_only)
            else:
                # openpyxl refuses file names with other extensions.
                with open(path, "rb") as handle:
                    workbook = load_workbook(handle, data_only=data_only)
        except Exception as e:
            raise SerializationError(
                file_path=file_path,
                operation="load",
                reason=str(e),
            ) from e

        if path.suffix.lower() in self.TEMPLATE_EXTENSIONS and not read_only:
            workbook.template = False

        return workbook

    def save(self, workbook: Workbook, file_path: str) -> None:
        """
        Save a workbook as xlsx.

        Args:
            workbook: Workbook to serialize.
            file_path: Target path.

        Raises:
            SerializationError: If openpyxl fails to write the file.
        """
        try:
            workbook.save(file_path)
        except Exception as e:
            raise SerializationError(
                file_path=file_path,
                operation="save",
                reason=str(e),
            ) from e


class OpenpyxlReader:
    """
    Configurable xlsx reader.

    Public ``set_*`` methods are the custom calls an import may apply
    before ``load()``.

    Attributes:
        file_path: Workbook to read.
        strategy: Cache strategy deciding whether to stream by default.
        check_extension: Reject files without an xlsx-family extension.
    """

    def __init__(
        self,
        file_path: str,
        strategy: CacheStrategy | None = None,
        adapter: OpenpyxlAdapter | None = None,
        check_extension: bool = True,
    ) -> None:
        self.file_path = file_path
        self.strategy = strategy
        self.adapter = adapter or OpenpyxlAdapter()
        self.check_extension = check_extension
        self.read_data_only = False
        self.read_only: bool | None = None
        self.load_sheets_only: list[str] | None = None

    def set_read_data_only(self, read_data_only: bool = True) -> None:
        """Read cached cell values instead of formulas."""
        self.read_data_only = bool(read_data_only)

    def set_read_only(self, read_only: bool = True) -> None:
        """Force (or forbid) streaming regardless of the cache strategy."""
        self.read_only = bool(read_only)

    def set_load_sheets_only(self, *sheet_names: str | list[str]) -> None:
        """Only keep the named worksheets."""
        names: list[str] = []
        for entry in sheet_names:
            names.extend([entry] if isinstance(entry, str) else entry)
        self.load_sheets_only = names

    def _streaming(self) -> bool:
        if self.read_only is not None:
            return self.read_only
        if self.strategy is None or not os.path.exists(self.file_path):
            return False
        return self.strategy.streaming_for(os.path.getsize(self.file_path))

    def load(self) -> Workbook:
        """
        Load the workbook with the configured options.

        Returns:
            Workbook instance.
        """
        streaming = self._streaming()
        workbook = self.adapter.load(
            self.file_path,
            data_only=self.read_data_only,
            read_only=streaming,
            check_extension=self.check_extension,
        )

        if self.load_sheets_only is not None:
            if streaming:
                # Read-only workbooks cannot drop sheets; reload fully.
                workbook.close()
                workbook = self.adapter.load(
                    self.file_path,
                    data_only=self.read_data_only,
                    check_extension=self.check_extension,
                )
            for name in list(workbook.sheetnames):
                if name not in self.load_sheets_only:
                    workbook.remove(workbook[name])

        return workbook


def normalize_cell_value(value: Any) -> Any:
    """
    Normalize a value coming from a reader to Python types.

    Integral floats become ints; strings, numbers, booleans and dates pass
    through; anything else is stringified. Empty strings become None so
    that empty cells stay empty in the workbook model.

    Args:
        value: Raw cell value.

    Returns:
        Normalized Python value.
    """
    if value is None or value == "":
        return None

    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        return value

    if isinstance(value, (str, int, bool, datetime)):
        return value

    if hasattr(value, "isoformat"):
        return value

    return str(value)
