"""
Legacy Excel 97-2003 (.xls) writer backed by xlwt.

xlwt is imported lazily so a missing installation is reported as a missing
library. The legacy format caps a sheet at 65536 rows and 256 columns and
a sheet title at 31 characters.
"""

from datetime import date, datetime, time
from typing import Any

from openpyxl import Workbook
from openpyxl.utils import range_boundaries

from sheetbridge.exceptions.spreadsheet_exceptions import (
    LibraryNotFoundError,
    SerializationError,
)

MAX_TITLE_LENGTH = 31


class XlsWriter:
    """Writes a workbook in the legacy binary Excel format."""

    def save(self, workbook: Workbook, file_path: str) -> None:
        """
        Serialize the workbook.

        Args:
            workbook: Workbook to serialize.
            file_path: Target path.

        Raises:
            LibraryNotFoundError: If xlwt is not installed.
            SerializationError: If the workbook does not fit the format or
                cannot be written.
        """
        try:
            import xlwt
        except ImportError as e:
            raise LibraryNotFoundError("xlwt") from e

        formats = {
            datetime: xlwt.easyxf(num_format_str="YYYY-MM-DD HH:MM:SS"),
            date: xlwt.easyxf(num_format_str="YYYY-MM-DD"),
            time: xlwt.easyxf(num_format_str="HH:MM:SS"),
        }
        centered = xlwt.easyxf("align: horiz center")

        def style_for(value: Any, merged: bool = False) -> Any:
            if merged:
                return centered
            for kind, style in formats.items():
                if isinstance(value, kind):
                    return style
            return xlwt.Style.default_style

        try:
            book = xlwt.Workbook(encoding="utf-8")

            for worksheet in workbook.worksheets:
                sheet = book.add_sheet(worksheet.title[:MAX_TITLE_LENGTH], cell_overwrite_ok=True)

                merges = [range_boundaries(str(merged)) for merged in worksheet.merged_cells.ranges]
                covered = {
                    (row, col)
                    for min_col, min_row, max_col, max_row in merges
                    for row in range(min_row, max_row + 1)
                    for col in range(min_col, max_col + 1)
                }

                for row_index, values in enumerate(worksheet.iter_rows(values_only=True)):
                    for col_index, value in enumerate(values):
                        if value is None or (row_index + 1, col_index + 1) in covered:
                            continue
                        sheet.write(row_index, col_index, value, style_for(value))

                for min_col, min_row, max_col, max_row in merges:
                    anchor = worksheet.cell(row=min_row, column=min_col).value
                    sheet.write_merge(
                        min_row - 1,
                        max_row - 1,
                        min_col - 1,
                        max_col - 1,
                        "" if anchor is None else anchor,
                        style_for(anchor, merged=True),
                    )

            book.save(file_path)
        except Exception as e:
            raise SerializationError(
                file_path=file_path,
                operation="save",
                reason=str(e),
            ) from e
