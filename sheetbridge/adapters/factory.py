"""
Reader and writer selection.

Imports choose a reader by file extension; files loaded for an update
(append or template) choose one by their content. Every reader produces
an openpyxl Workbook; writers are chosen by ExportFormat and serialize one.
"""

import os
import zipfile
from pathlib import Path
from typing import Protocol

from openpyxl import Workbook

from sheetbridge.adapters.calamine_adapter import CalamineReader
from sheetbridge.adapters.csv_adapter import CsvReader, CsvWriter
from sheetbridge.adapters.odf_adapter import OdsWriter
from sheetbridge.adapters.openpyxl_adapter import OpenpyxlAdapter, OpenpyxlReader
from sheetbridge.adapters.xlwt_adapter import XlsWriter
from sheetbridge.cache_strategy import CacheStrategy
from sheetbridge.exceptions.spreadsheet_exceptions import FileNotReadableError, SerializationError
from sheetbridge.models.spreadsheet_models import ExportFormat

ZIP_SIGNATURE = b"PK\x03\x04"
OLE_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


class SpreadsheetReader(Protocol):
    file_path: str

    def load(self) -> Workbook: ...


class SpreadsheetWriter(Protocol):
    def save(self, workbook: Workbook, file_path: str) -> None: ...


READERS = {
    **{extension: OpenpyxlReader for extension in OpenpyxlAdapter.SUPPORTED_EXTENSIONS},
    **{extension: CalamineReader for extension in CalamineReader.SUPPORTED_EXTENSIONS},
    ".csv": CsvReader,
}


def create_reader(file_path: str, strategy: CacheStrategy | None = None) -> SpreadsheetReader:
    """
    Get a reader for a file.

    Args:
        file_path: File to read.
        strategy: Cache strategy of the running call.

    Returns:
        A reader whose ``load()`` returns an openpyxl Workbook.

    Raises:
        FileNotReadableError: If no reader handles the file's extension.
    """
    extension = Path(file_path).suffix.lower()
    reader_class = READERS.get(extension)
    if reader_class is None:
        raise FileNotReadableError(
            file_path,
            reason=f"Unsupported file extension: {extension or '(none)'}",
        )
    return reader_class(file_path, strategy)


def sniff_reader(file_path: str) -> type:
    """
    Pick a reader class from a file's content rather than its name.

    Zip archives are ods or xlsb when they carry the matching parts and
    xlsx otherwise, OLE compound files are legacy xls, and anything else
    is read as csv.

    Args:
        file_path: Existing file.

    Returns:
        The reader class able to load the file.

    Raises:
        FileNotReadableError: If the file cannot be opened.
        SerializationError: If a zip signature is present but the archive
            is corrupt.
    """
    try:
        with open(file_path, "rb") as handle:
            signature = handle.read(len(OLE_SIGNATURE))
    except OSError as e:
        raise FileNotReadableError(file_path, reason=str(e)) from e

    if signature == OLE_SIGNATURE:
        return CalamineReader
    if not signature.startswith(ZIP_SIGNATURE):
        return CsvReader

    try:
        with zipfile.ZipFile(file_path) as archive:
            names = set(archive.namelist())
    except zipfile.BadZipFile as e:
        raise SerializationError(file_path=file_path, operation="load", reason=str(e)) from e

    if "mimetype" in names or "xl/workbook.bin" in names:
        return CalamineReader
    return OpenpyxlReader


def load_for_update(file_path: str, strategy: CacheStrategy | None = None) -> Workbook:
    """
    Load a workbook that is going to be modified and saved again.

    The reader follows the file content, so a file written in a format
    that differs from its extension can still be appended to. Formulas
    are kept and the workbook is always fully materialized.

    Args:
        file_path: Existing file or template.
        strategy: Cache strategy of the running call.

    Returns:
        A writable Workbook.

    Raises:
        FileNotReadableError: If the file does not exist.
    """
    if not os.path.isfile(file_path):
        raise FileNotReadableError(file_path, reason="file does not exist")

    reader_class = sniff_reader(file_path)
    if reader_class is CsvReader:
        return CsvReader(file_path, strategy).load()

    reader = reader_class(file_path, strategy, check_extension=False)
    if isinstance(reader, OpenpyxlReader):
        reader.set_read_only(False)
    return reader.load()


def create_writer(fmt: ExportFormat) -> SpreadsheetWriter:
    """
    Get the writer for an output format.

    Args:
        fmt: Output format.

    Returns:
        xlsx → openpyxl, csv → CSV writer, ods → odfpy, anything else →
        the legacy xls writer.
    """
    if fmt is ExportFormat.XLSX:
        return OpenpyxlAdapter()
    if fmt is ExportFormat.CSV:
        return CsvWriter()
    if fmt is ExportFormat.ODS:
        return OdsWriter()
    return XlsWriter()
