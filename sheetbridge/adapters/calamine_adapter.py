"""
Calamine adapter for reading legacy and OpenDocument spreadsheets.

This module provides the CalamineReader class that wraps python-calamine
for reading Excel files. python-calamine is a Rust-based library that
provides exceptional performance for large files with minimal memory
footprint. Sheets are copied into an openpyxl Workbook so the import
orchestrator sees one workbook model whatever the source format.

Supported formats:
    - .xls (Excel 97-2003)
    - .xlsb (Excel Binary)
    - .ods (OpenDocument Spreadsheet)

Example:
    reader = CalamineReader("/path/to/file.ods")
    reader.set_load_sheets_only(["Data"])
    workbook = reader.load()
"""

from pathlib import Path

from openpyxl import Workbook
from python_calamine import CalamineWorkbook

from sheetbridge.adapters.openpyxl_adapter import normalize_cell_value
from sheetbridge.cache_strategy import CacheStrategy
from sheetbridge.exceptions.spreadsheet_exceptions import (
    FileNotReadableError,
    SerializationError,
)


class CalamineReader:
    """
    Reader for xls, xlsb and ods files.

    Attributes:
        SUPPORTED_EXTENSIONS: Tuple of supported file extensions.
        file_path: Workbook to read.
        strategy: Cache strategy of the running call. Calamine always reads
            sheet by sheet, so the strategy is informational only.
        check_extension: Reject files without a supported extension. When
            False, the format is detected from the file content.
    """

    SUPPORTED_EXTENSIONS = (".xls", ".xlsb", ".ods")

    def __init__(
        self,
        file_path: str,
        strategy: CacheStrategy | None = None,
        check_extension: bool = True,
    ) -> None:
        self.file_path = file_path
        self.strategy = strategy
        self.check_extension = check_extension
        self.load_sheets_only: list[str] | None = None

    def set_load_sheets_only(self, *sheet_names: str | list[str]) -> None:
        """Only copy the named worksheets."""
        names: list[str] = []
        for entry in sheet_names:
            names.extend([entry] if isinstance(entry, str) else entry)
        self.load_sheets_only = names

    def _validate_file_path(self) -> Path:
        """
        Validate that the file exists and has a supported extension.

        Returns:
            Path object for the validated file.

        Raises:
            FileNotReadableError: If the file is missing or its extension
                is not supported.
        """
        path = Path(self.file_path)

        if not path.is_file():
            raise FileNotReadableError(self.file_path, reason="file does not exist")

        if self.check_extension and path.suffix.lower() not in self.SUPPORTED_EXTENSIONS:
            raise FileNotReadableError(
                self.file_path,
                reason=f"Unsupported file extension: {path.suffix}",
            )

        return path

    def load(self) -> Workbook:
        """
        Read every (selected) sheet into a new openpyxl Workbook.

        Returns:
            Workbook holding the sheets in file order.

        Raises:
            FileNotReadableError: If the file cannot be opened.
            SerializationError: If calamine fails to parse the file.
        """
        path = self._validate_file_path()

        try:
            if self.check_extension:
                source = CalamineWorkbook.from_path(str(path))
            else:
                # Calamine picks the format by extension unless given the bytes.
                with open(path, "rb") as handle:
                    source = CalamineWorkbook.from_filelike(handle)
            sheets = [
                (name, source.get_sheet_by_name(name).to_python(skip_empty_area=False))
                for name in source.sheet_names
                if self.load_sheets_only is None or name in self.load_sheets_only
            ]
        except Exception as e:
            raise SerializationError(
                file_path=self.file_path,
                operation="load",
                reason=str(e),
            ) from e

        workbook = Workbook()
        workbook.remove(workbook.active)

        for name, rows in sheets:
            worksheet = workbook.create_sheet(name)
            for row in rows:
                worksheet.append([normalize_cell_value(value) for value in row])

        return workbook
