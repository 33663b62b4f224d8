"""
OpenDocument spreadsheet writer backed by odfpy.

Serializes every worksheet of an openpyxl Workbook as a table of an .ods
document, keeping merged ranges and the document properties. odfpy is
imported lazily so a missing installation is reported as a missing library
instead of failing at import time.
"""

from datetime import date, datetime, time
from typing import Any

from openpyxl import Workbook
from openpyxl.utils import range_boundaries
from openpyxl.worksheet.worksheet import Worksheet

from sheetbridge.exceptions.spreadsheet_exceptions import (
    LibraryNotFoundError,
    SerializationError,
)


def _merge_spans(worksheet: Worksheet) -> tuple[dict[tuple[int, int], tuple[int, int]], set[tuple[int, int]]]:
    """
    Map merged ranges to spans.

    Returns:
        The (rows, columns) span of each merge anchor keyed by 1-based
        (row, column), and the set of covered cells.
    """
    anchors: dict[tuple[int, int], tuple[int, int]] = {}
    covered: set[tuple[int, int]] = set()
    for merged in worksheet.merged_cells.ranges:
        min_col, min_row, max_col, max_row = range_boundaries(str(merged))
        anchors[(min_row, min_col)] = (max_row - min_row + 1, max_col - min_col + 1)
        for row in range(min_row, max_row + 1):
            for col in range(min_col, max_col + 1):
                if (row, col) != (min_row, min_col):
                    covered.add((row, col))
    return anchors, covered


class OdsWriter:
    """Writes a workbook as an OpenDocument spreadsheet."""

    def _cell(self, table_cell: Any, paragraph: Any, value: Any, **attributes: Any) -> Any:
        """
        Build a typed table cell.

        Args:
            table_cell: odfpy TableCell factory.
            paragraph: odfpy P factory.
            value: Cell value.
            attributes: Extra TableCell attributes (spans).

        Returns:
            The TableCell element.
        """
        if value is None:
            return table_cell(**attributes)

        if isinstance(value, bool):
            cell = table_cell(valuetype="boolean", booleanvalue="true" if value else "false", **attributes)
        elif isinstance(value, (int, float)):
            cell = table_cell(valuetype="float", value=str(value), **attributes)
        elif isinstance(value, (datetime, date)):
            cell = table_cell(valuetype="date", datevalue=value.isoformat(), **attributes)
        elif isinstance(value, time):
            cell = table_cell(
                valuetype="time",
                timevalue=f"PT{value.hour}H{value.minute}M{value.second}S",
                **attributes,
            )
        else:
            cell = table_cell(valuetype="string", **attributes)

        cell.addElement(paragraph(text=str(value)))
        return cell

    def save(self, workbook: Workbook, file_path: str) -> None:
        """
        Serialize the workbook.

        Args:
            workbook: Workbook to serialize.
            file_path: Target path.

        Raises:
            LibraryNotFoundError: If odfpy is not installed.
            SerializationError: If the document cannot be written.
        """
        try:
            from odf import dc, meta
            from odf.opendocument import OpenDocumentSpreadsheet
            from odf.table import CoveredTableCell, Table, TableCell, TableRow
            from odf.text import P
        except ImportError as e:
            raise LibraryNotFoundError("odfpy") from e

        document = OpenDocumentSpreadsheet()

        properties = workbook.properties
        if properties.creator:
            document.meta.addElement(meta.InitialCreator(text=properties.creator))
            document.meta.addElement(dc.Creator(text=properties.creator))
        if properties.title:
            document.meta.addElement(dc.Title(text=properties.title))
        if properties.subject:
            document.meta.addElement(dc.Subject(text=properties.subject))
        if properties.description:
            document.meta.addElement(dc.Description(text=properties.description))

        for worksheet in workbook.worksheets:
            table = Table(name=worksheet.title)
            anchors, covered = _merge_spans(worksheet)

            for row_index, values in enumerate(worksheet.iter_rows(values_only=True), start=1):
                table_row = TableRow()
                for col_index, value in enumerate(values, start=1):
                    if (row_index, col_index) in covered:
                        table_row.addElement(CoveredTableCell())
                        continue
                    attributes = {}
                    if (row_index, col_index) in anchors:
                        rows, columns = anchors[(row_index, col_index)]
                        attributes = {
                            "numberrowsspanned": str(rows),
                            "numbercolumnsspanned": str(columns),
                        }
                    table_row.addElement(self._cell(TableCell, P, value, **attributes))
                table.addElement(table_row)

            document.spreadsheet.addElement(table)

        try:
            document.save(file_path)
        except Exception as e:
            raise SerializationError(
                file_path=file_path,
                operation="save",
                reason=str(e),
            ) from e
