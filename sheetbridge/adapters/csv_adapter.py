"""
CSV reading and writing.

CSV files hold a single sheet. Reading produces a one-sheet openpyxl
Workbook with numeric strings converted to numbers; writing serializes the
first worksheet of a workbook.
"""

import csv
import re
from datetime import date, datetime, time
from typing import Any

from openpyxl import Workbook

from sheetbridge.cache_strategy import CacheStrategy
from sheetbridge.exceptions.spreadsheet_exceptions import (
    FileNotReadableError,
    SerializationError,
)

_INTEGER = re.compile(r"^[+-]?\d+$")
_DECIMAL = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")


def _coerce(text: str) -> Any:
    """Turn a CSV field into a number when it looks like one."""
    if text == "":
        return None
    stripped = text.strip()
    if _INTEGER.match(stripped):
        return int(stripped)
    if _DECIMAL.match(stripped):
        return float(stripped)
    return text


def _format(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat(sep=" ") if isinstance(value, datetime) else value.isoformat()
    return value


class CsvReader:
    """
    Configurable CSV reader.

    Public ``set_*`` methods are the custom calls an import may apply
    before ``load()``.

    Attributes:
        file_path: File to read.
        delimiter: Field separator.
        enclosure: Quote character.
        input_encoding: Text encoding of the file.
        sheet_title: Title of the single worksheet produced.
    """

    def __init__(self, file_path: str, strategy: CacheStrategy | None = None) -> None:
        self.file_path = file_path
        self.strategy = strategy
        self.delimiter = ","
        self.enclosure = '"'
        self.input_encoding = "utf-8-sig"
        self.sheet_title = "Worksheet 1"

    def set_delimiter(self, delimiter: str) -> None:
        self.delimiter = delimiter

    def set_enclosure(self, enclosure: str) -> None:
        self.enclosure = enclosure

    def set_input_encoding(self, encoding: str) -> None:
        self.input_encoding = encoding

    def set_sheet_title(self, title: str) -> None:
        self.sheet_title = title

    def load(self) -> Workbook:
        """
        Read the file into a one-sheet Workbook.

        Returns:
            Workbook holding the CSV rows.

        Raises:
            FileNotReadableError: If the file cannot be opened.
            SerializationError: If the file cannot be decoded or parsed.
        """
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = self.sheet_title

        try:
            with open(self.file_path, newline="", encoding=self.input_encoding) as handle:
                for row in csv.reader(handle, delimiter=self.delimiter, quotechar=self.enclosure):
                    worksheet.append([_coerce(field) for field in row])
        except OSError as e:
            raise FileNotReadableError(self.file_path, reason=str(e)) from e
        except (csv.Error, UnicodeDecodeError) as e:
            raise SerializationError(
                file_path=self.file_path,
                operation="load",
                reason=str(e),
            ) from e

        return workbook


class CsvWriter:
    """
    Writes the first worksheet of a workbook as CSV.

    Attributes:
        delimiter: Field separator.
        enclosure: Quote character.
        line_terminator: Row separator.
        encoding: Output text encoding.
    """

    def __init__(
        self,
        delimiter: str = ",",
        enclosure: str = '"',
        line_terminator: str = "\r\n",
        encoding: str = "utf-8",
    ) -> None:
        self.delimiter = delimiter
        self.enclosure = enclosure
        self.line_terminator = line_terminator
        self.encoding = encoding

    def save(self, workbook: Workbook, file_path: str) -> None:
        """
        Serialize the first worksheet.

        Args:
            workbook: Workbook to serialize.
            file_path: Target path.

        Raises:
            SerializationError: If the file cannot be written.
        """
        worksheet = workbook.worksheets[0]

        try:
            with open(file_path, "w", newline="", encoding=self.encoding) as handle:
                writer = csv.writer(
                    handle,
                    delimiter=self.delimiter,
                    quotechar=self.enclosure,
                    lineterminator=self.line_terminator,
                )
                for values in worksheet.iter_rows(values_only=True):
                    writer.writerow([_format(value) for value in values])
        except (OSError, csv.Error) as e:
            raise SerializationError(
                file_path=file_path,
                operation="save",
                reason=str(e),
            ) from e
